"""Lazy, keyed cache of elevation tiles.

Each RegionKey maps to exactly one entry: the loaded SampleGrid, or the
ABSENT sentinel when no tile file exists. Entries are written once and never
replaced, so a tile is parsed at most once and a missing tile is probed on
the filesystem at most once. The cache only empties on ``clear()``.

Check-then-load runs under a single lock; the lock is not held while the
caller interpolates.
"""

from __future__ import annotations

import logging
import threading
from typing import Final

from domain.elevation.errors import InvalidTileError
from domain.elevation.repositories import TileRepository
from domain.elevation.services import region_key
from domain.elevation.value_objects import RegionKey, SampleGrid

logger = logging.getLogger(__name__)


class _Absent:
    """Sentinel type for tiles known not to exist."""

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT: Final = _Absent()

TileCacheEntry = SampleGrid | _Absent


class TileCache:
    """Monotonic RegionKey -> TileCacheEntry mapping backed by a TileRepository.

    Attributes:
        loads: Number of tiles parsed from storage
        absent_probes: Number of keys found to have no tile
        hits: Number of lookups served from memory
    """

    def __init__(self, repository: TileRepository) -> None:
        self._repository = repository
        self._entries: dict[RegionKey, TileCacheEntry] = {}
        self._lock = threading.Lock()
        self.loads = 0
        self.absent_probes = 0
        self.hits = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def entry(self, key: RegionKey) -> TileCacheEntry | None:
        """Return the stored entry for ``key`` without loading (None if unseen)."""
        return self._entries.get(key)

    def get_grid(self, key: RegionKey) -> SampleGrid | None:
        """Return the grid for ``key``, loading it on first access.

        Returns None when the tile does not exist.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self.hits += 1
            else:
                entry = self._load(key)
                self._entries[key] = entry
        return None if entry is ABSENT else entry

    def get_grid_for(self, easting: int, northing: int) -> SampleGrid | None:
        """Return the grid holding the sample at (easting, northing)."""
        return self.get_grid(region_key(easting, northing))

    def sample(self, easting: int, northing: int) -> float | None:
        """Return the stored elevation at (easting, northing), or None."""
        grid = self.get_grid_for(easting, northing)
        if grid is None:
            return None
        return grid.sample(easting, northing)

    def clear(self) -> None:
        """Drop every entry, loaded and absent alike."""
        with self._lock:
            released = len(self._entries)
            self._entries.clear()
        logger.info("Released %d cached tiles", released)

    def _load(self, key: RegionKey) -> TileCacheEntry:
        # Caller holds the lock
        if not self._repository.tile_exists(key):
            self.absent_probes += 1
            logger.debug("No tile for key %s; marked absent", key)
            return ABSENT

        logger.info(
            "Loading tile with key %s (tiles currently cached: %d)",
            key,
            len(self._entries),
        )
        self.loads += 1
        try:
            return self._repository.load_tile(key)
        except InvalidTileError as e:
            # Broken files are cached as empty grids and never re-parsed
            logger.warning("Tile %s unusable, treating as empty: %s", key, e)
            return SampleGrid.empty(key, self._repository.resolution)
