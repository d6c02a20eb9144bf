"""XYZ adapter for TileRepository.

Locates DGM tiles on disk and parses them into SampleGrid Value Objects.

File layout:
    <cache_dir>/<release>/s32_<E>/dgm<R>_32_<E>_<N>_1_hh.xyz

where <release> comes from DATASET_RELEASES, <R> is the resolution in meters
and <E>/<N> are the RegionKey prefixes.

File format: one sample per line, ``<easting> <northing> <elevation>``,
EPSG:25832 meters, no header. Duplicated coordinates: last value wins.
"""

from __future__ import annotations

import logging
import warnings
from pathlib import Path

import numpy as np

from domain.elevation.errors import InvalidTileError, UnknownResolutionError
from domain.elevation.value_objects import RegionKey, SampleGrid
from infrastructure.config import DATASET_RELEASES

# Module-level logger (reused across all calls)
logger = logging.getLogger(__name__)

TILE_SUFFIX = ".xyz"


def read_xyz(file_path: Path | str, key: RegionKey, resolution: int) -> SampleGrid:
    """Parse an XYZ tile into a SampleGrid.

    Coordinates are rounded half-up to whole meters so that lookups by
    integer coordinate match regardless of how many decimals the file uses.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidTileError: If the file is unreadable or not an XYZ grid
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(str(path))

    if path.suffix.lower() != TILE_SUFFIX:
        raise InvalidTileError(f"Unsupported file extension: {path.suffix}")

    try:
        if path.stat().st_size == 0:
            logger.debug("Tile %s: empty file", path.name)
            return SampleGrid.empty(key, resolution)

        with warnings.catch_warnings():
            # Whitespace-only files make numpy warn about missing data
            warnings.simplefilter("ignore", UserWarning)
            data = np.loadtxt(path, dtype=np.float64, ndmin=2)
    except OSError as e:
        # Log only filename, errno, and strerror to avoid leaking absolute paths
        logger.error(
            "Failed to read %s (errno=%s, strerror=%s)",
            path.name,
            getattr(e, "errno", "unknown"),
            getattr(e, "strerror", "unknown"),
        )
        raise InvalidTileError(f"Unreadable tile: {path.name}") from e
    except ValueError as e:
        raise InvalidTileError(f"Malformed tile {path.name}: {e}") from e

    if data.size == 0:
        return SampleGrid.empty(key, resolution)

    if data.shape[1] != 3:
        raise InvalidTileError(
            f"Expected 3 columns (easting northing elevation), got {data.shape[1]}"
        )
    if not np.isfinite(data).all():
        raise InvalidTileError(f"Non-finite values in tile {path.name}")

    coords = np.floor(data[:, :2] + 0.5).astype(np.int64)
    elevations = data[:, 2]

    # dict() keeps the last value for repeated coordinates
    samples = dict(
        zip(
            zip(coords[:, 0].tolist(), coords[:, 1].tolist()),
            elevations.tolist(),
        )
    )

    if len(samples) < len(data):
        logger.debug(
            "Tile %s: %d duplicate coordinates (last value kept)",
            path.name,
            len(data) - len(samples),
        )
    logger.debug("Tile %s: Parsed %d samples", path.name, len(samples))

    return SampleGrid(key=key, resolution=resolution, samples=samples)


class XyzTileAdapter:
    """Infrastructure adapter for DGM tiles stored as XYZ text files.

    Parameters
    ----------
    cache_dir: Path | str
        Root directory the dataset archive was extracted into.
    resolution: int
        Sample spacing in meters; selects the release folder and file prefix.
    """

    def __init__(self, cache_dir: Path | str, resolution: int) -> None:
        if resolution not in DATASET_RELEASES:
            raise UnknownResolutionError(f"Unknown resolution: {resolution}")
        self.cache_dir = Path(cache_dir)
        self.resolution = resolution

    @property
    def release_dir(self) -> Path:
        return self.cache_dir / DATASET_RELEASES[self.resolution]

    def tile_path(self, key: RegionKey) -> Path:
        """Deterministic file path for the tile identified by ``key``."""
        folder = f"s32_{key.easting_prefix}"
        name = (
            f"dgm{self.resolution}_32_{key.easting_prefix}_{key.northing_prefix}_1_hh"
            f"{TILE_SUFFIX}"
        )
        return self.release_dir / folder / name

    def tile_exists(self, key: RegionKey) -> bool:
        return self.tile_path(key).is_file()

    def load_tile(self, key: RegionKey) -> SampleGrid:
        return read_xyz(self.tile_path(key), key, self.resolution)
