"""Root pytest configuration for all tests.

Fixtures here are shared by the pure domain tests (tests/elevation/) and the
infrastructure tests (tests/gis/).
"""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.elevation.services import region_key
from domain.elevation.value_objects import GeodeticCoordinate, ProjectedCoordinate
from tests.conftest_utils import CountingRepository, get_fixtures_dir


class FakeTransformer:
    """CoordinateTransformer returning a fixed projected point.

    Records every call so tests can assert that no reprojection happened.
    """

    def __init__(self, easting: float = 551512.0, northing: float = 5930512.0) -> None:
        self.result = ProjectedCoordinate(easting=easting, northing=northing)
        self.calls: list[GeodeticCoordinate] = []
        self.error: Exception | None = None

    def transform(self, coordinate: GeodeticCoordinate) -> ProjectedCoordinate:
        self.calls.append(coordinate)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fixtures_dir() -> Path:
    return get_fixtures_dir()


@pytest.fixture
def fake_transformer() -> FakeTransformer:
    return FakeTransformer()


@pytest.fixture
def corner_samples() -> dict[tuple[int, int], float]:
    """One 25 m cell at the origin: q11=10, q21=20, q12=30, q22=40."""
    return {(0, 0): 10.0, (25, 0): 20.0, (0, 25): 30.0, (25, 25): 40.0}


@pytest.fixture
def counting_repository() -> CountingRepository:
    """Repository with a single known tile around (551000, 5930000)."""
    key = region_key(551000, 5930000)
    return CountingRepository(
        {
            key: {
                (551500, 5930500): 20.0,
                (551525, 5930500): 21.0,
                (551500, 5930525): 22.0,
                (551525, 5930525): 23.0,
            }
        }
    )
