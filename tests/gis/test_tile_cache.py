"""Tests for TileCache.

A CountingRepository records every storage access so the load-once and
probe-once guarantees can be asserted directly.
"""

from __future__ import annotations

import logging
import threading

import pytest

from domain.elevation.errors import InvalidTileError
from domain.elevation.services import region_key
from domain.elevation.value_objects import RegionKey, SampleGrid
from infrastructure.elevation.tile_cache import ABSENT, TileCache
from infrastructure.elevation.xyz_adapter import XyzTileAdapter
from tests.conftest_utils import CountingRepository, get_fixtures_dir

KNOWN = RegionKey(easting_prefix="551", northing_prefix="5930")
MISSING = RegionKey(easting_prefix="999", northing_prefix="5930")


class BrokenRepository(CountingRepository):
    """Every existing tile fails to parse."""

    def load_tile(self, key: RegionKey) -> SampleGrid:
        self.load_calls.append(key)
        raise InvalidTileError(f"broken tile {key}")


# ---------------------------------------------------------------------------
# Load-once semantics
# ---------------------------------------------------------------------------
def test_tile_loaded_once(counting_repository: CountingRepository) -> None:
    """TC-201: repeated lookups parse a tile only once."""
    cache = TileCache(counting_repository)

    first = cache.get_grid(KNOWN)
    second = cache.get_grid(KNOWN)

    assert first is second
    assert counting_repository.load_calls == [KNOWN]
    assert cache.loads == 1
    assert cache.hits == 1


def test_absent_tile_probed_once(counting_repository: CountingRepository) -> None:
    """TC-202: a missing tile is remembered as ABSENT."""
    cache = TileCache(counting_repository)

    assert cache.get_grid(MISSING) is None
    assert cache.get_grid(MISSING) is None

    assert counting_repository.exists_calls == [MISSING]
    assert counting_repository.load_calls == []
    assert cache.entry(MISSING) is ABSENT
    assert cache.absent_probes == 1


def test_absent_sentinel_is_falsy() -> None:
    assert not ABSENT
    assert repr(ABSENT) == "ABSENT"


def test_entry_does_not_load(counting_repository: CountingRepository) -> None:
    cache = TileCache(counting_repository)
    assert cache.entry(KNOWN) is None
    assert KNOWN not in cache
    assert counting_repository.exists_calls == []


def test_sample_resolves_key_from_coordinate(counting_repository: CountingRepository) -> None:
    """TC-203: sample() routes through the region key of the coordinate."""
    cache = TileCache(counting_repository)

    assert cache.sample(551500, 5930500) == 20.0
    assert cache.sample(551525, 5930525) == 23.0
    assert cache.sample(551550, 5930500) is None  # gap inside a known tile
    assert cache.sample(999000, 5930000) is None  # no tile

    assert counting_repository.load_calls == [KNOWN]
    assert len(cache) == 2


def test_get_grid_for(counting_repository: CountingRepository) -> None:
    cache = TileCache(counting_repository)
    grid = cache.get_grid_for(551999, 5930999)
    assert grid is not None
    assert grid.key == KNOWN


# ---------------------------------------------------------------------------
# Invalid tiles
# ---------------------------------------------------------------------------
def test_invalid_tile_cached_as_empty(caplog) -> None:
    """TC-204: a broken tile becomes an empty grid and is never re-parsed."""
    repository = BrokenRepository({KNOWN: {}})
    cache = TileCache(repository)

    with caplog.at_level(logging.WARNING):
        grid = cache.get_grid(KNOWN)
        again = cache.get_grid(KNOWN)

    assert grid is not None
    assert len(grid) == 0
    assert grid.resolution == repository.resolution
    assert again is grid
    assert repository.load_calls == [KNOWN]
    assert "unusable" in caplog.text


def test_malformed_fixture_through_adapter() -> None:
    """TC-205: the malformed fixture tile yields no samples instead of an error."""
    cache = TileCache(XyzTileAdapter(get_fixtures_dir(), 25))
    assert cache.sample(553000, 5930000) is None
    assert cache.sample(553000, 5930000) is None
    assert cache.loads == 1


# ---------------------------------------------------------------------------
# Release
# ---------------------------------------------------------------------------
def test_clear_drops_loaded_and_absent(counting_repository: CountingRepository, caplog) -> None:
    """TC-206: clear() empties the cache; the next lookup goes back to storage."""
    cache = TileCache(counting_repository)
    cache.get_grid(KNOWN)
    cache.get_grid(MISSING)

    with caplog.at_level(logging.INFO, logger="infrastructure.elevation.tile_cache"):
        cache.clear()

    assert len(cache) == 0
    assert "Released 2 cached tiles" in caplog.text

    cache.get_grid(KNOWN)
    assert counting_repository.load_calls == [KNOWN, KNOWN]


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------
def test_concurrent_lookups_load_once(counting_repository: CountingRepository) -> None:
    """TC-207: many threads racing on one key trigger a single load."""
    cache = TileCache(counting_repository)
    barrier = threading.Barrier(8)
    results: list[float | None] = []
    lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        value = cache.sample(551500, 5930500)
        with lock:
            results.append(value)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert results == [20.0] * 8
    assert counting_repository.load_calls == [KNOWN]


@pytest.mark.integration
def test_fixture_tiles_share_one_cache() -> None:
    """TC-208: distinct keys get distinct entries."""
    cache = TileCache(XyzTileAdapter(get_fixtures_dir(), 25))
    cache.sample(551500, 5930500)
    cache.sample(552000, 5930000)
    assert region_key(551500, 5930500) in cache
    assert region_key(552000, 5930000) in cache
    assert cache.loads == 2
