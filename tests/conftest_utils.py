"""Shared pytest helpers.

This module provides reusable helpers for tests that need tiles on disk or
an instrumented in-memory repository.

These utilities are used by:
- tests/conftest.py
- tests/gis/*
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path

from domain.elevation.services import SampleAccessor, region_key
from domain.elevation.value_objects import RegionKey, SampleGrid
from infrastructure.config import DATASET_RELEASES


def get_fixtures_dir() -> Path:
    """Return path to tests/fixtures/ directory.

    The directory is laid out like an extracted dataset and can be used as a
    provider cache_dir directly.
    """
    return Path(__file__).parent / "fixtures"


def write_xyz_tile(
    cache_dir: Path,
    rows: Iterable[tuple[float, float, float]],
    *,
    resolution: int = 25,
    easting_prefix: str | None = None,
    northing_prefix: str | None = None,
) -> Path:
    """Write rows as an XYZ tile at the path the adapter would look for.

    Prefixes default to the key of the first row.
    """
    rows = list(rows)
    if easting_prefix is None or northing_prefix is None:
        key = region_key(int(rows[0][0]), int(rows[0][1]))
        easting_prefix = easting_prefix or key.easting_prefix
        northing_prefix = northing_prefix or key.northing_prefix

    path = (
        cache_dir
        / DATASET_RELEASES[resolution]
        / f"s32_{easting_prefix}"
        / f"dgm{resolution}_32_{easting_prefix}_{northing_prefix}_1_hh.xyz"
    )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(f"{e:.2f} {n:.2f} {z:.2f}\n" for e, n, z in rows))
    return path


def dict_accessor(samples: Mapping[tuple[int, int], float]) -> SampleAccessor:
    """SampleAccessor over a plain dict (missing keys -> None)."""

    def sample_at(x: int, y: int) -> float | None:
        return samples.get((x, y))

    return sample_at


class CountingRepository:
    """In-memory TileRepository that records every storage access.

    Attributes:
        exists_calls: Keys passed to tile_exists, in call order
        load_calls: Keys passed to load_tile, in call order
    """

    def __init__(
        self,
        tiles: Mapping[RegionKey, Mapping[tuple[int, int], float]] | None = None,
        resolution: int = 25,
    ) -> None:
        self.resolution = resolution
        self._tiles = dict(tiles or {})
        self.exists_calls: list[RegionKey] = []
        self.load_calls: list[RegionKey] = []

    def tile_exists(self, key: RegionKey) -> bool:
        self.exists_calls.append(key)
        return key in self._tiles

    def load_tile(self, key: RegionKey) -> SampleGrid:
        self.load_calls.append(key)
        return SampleGrid(key=key, resolution=self.resolution, samples=self._tiles[key])
