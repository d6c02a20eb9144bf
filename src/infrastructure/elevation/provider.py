"""Elevation Provider facade.

Public entry point for host engines. Exposes ``get_elevation(lat, lon)``,
which never raises and answers 0 for anything unknown, and ``release()``,
which frees every cached tile.

Pipeline per query:
1) Bounding-box fast reject (no reprojection, no I/O)
2) Reproject EPSG:4326 -> EPSG:25832 with the verified operation
3) Round the projected point half-up to whole meters
4) Resolve corner samples through the tile cache
5) Interpolate (bilinear or snapped)

``elevation_at`` is the strict variant: it raises OutOfCoverageError or
TransformError instead of degrading, and ``get_elevation`` is the only
place that turns those into 0.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType

import requests

from domain.elevation.errors import ElevationError, OutOfCoverageError, TransformError
from domain.elevation.repositories import CoordinateTransformer
from domain.elevation.services import interpolate
from domain.elevation.value_objects import (
    BoundingBox,
    GeodeticCoordinate,
    InterpolationMode,
)
from infrastructure.config import ElevationSettings, get_settings
from infrastructure.elevation.acquisition import prepare_dataset
from infrastructure.elevation.projection import PyprojTransformer
from infrastructure.elevation.tile_cache import TileCache
from infrastructure.elevation.xyz_adapter import XyzTileAdapter

logger = logging.getLogger(__name__)

NO_ELEVATION_M = 0.0


class ElevationProvider:
    """Ground elevation in meters for WGS84 coordinates.

    Parameters
    ----------
    transformer: CoordinateTransformer
        Reprojects queries into the tile frame; fixed for the provider lifetime.
    cache: TileCache
        Lazy tile cache; cleared by ``release()``.
    bounds: BoundingBox | None
        Dataset coverage used for the fast reject (default: Hamburg).
    resolution: int
        Grid spacing of the tiles in meters.
    interpolation: InterpolationMode
        Bilinear (default) or snapped.
    cache_dir: Path | None
        Directory the dataset lives in (informational).
    """

    def __init__(
        self,
        transformer: CoordinateTransformer,
        cache: TileCache,
        *,
        bounds: BoundingBox | None = None,
        resolution: int = 25,
        interpolation: InterpolationMode = InterpolationMode.BILINEAR,
        cache_dir: Path | None = None,
    ) -> None:
        if resolution <= 0:
            raise ValueError("resolution must be positive")
        self._transformer = transformer
        self._cache = cache
        self._bounds = bounds if bounds is not None else BoundingBox.hamburg()
        self._resolution = resolution
        self._interpolation = InterpolationMode(interpolation)
        self._cache_dir = cache_dir

    @classmethod
    def from_settings(
        cls,
        settings: ElevationSettings | None = None,
        *,
        session: requests.Session | None = None,
        prepare: bool = True,
    ) -> "ElevationProvider":
        """Host construction hook.

        Downloads and extracts the dataset when ``prepare`` is set, then
        selects the coordinate operation. Any failure here aborts start-up.

        Raises:
            AcquisitionError: Dataset could not be obtained
            NoValidTransformError: No operation passed the anchor check
        """
        settings = settings if settings is not None else get_settings()
        if prepare:
            prepare_dataset(settings, session=session)

        transformer = PyprojTransformer(settings.source_crs, settings.target_crs)
        adapter = XyzTileAdapter(settings.cache_dir, settings.resolution)
        logger.info(
            "Elevation provider ready (resolution=%dm, interpolation=%s)",
            settings.resolution,
            settings.interpolation.value,
        )
        return cls(
            transformer,
            TileCache(adapter),
            bounds=settings.bounding_box(),
            resolution=settings.resolution,
            interpolation=settings.interpolation,
            cache_dir=settings.cache_dir,
        )

    # -------- public API --------

    @property
    def bounds(self) -> BoundingBox:
        return self._bounds

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def interpolation(self) -> InterpolationMode:
        return self._interpolation

    @property
    def cache_dir(self) -> Path | None:
        return self._cache_dir

    @property
    def cache(self) -> TileCache:
        return self._cache

    def get_elevation(self, lat: float, lon: float) -> float:
        """Elevation in meters at (lat, lon); 0 when outside coverage or unknown."""
        if not self._bounds.contains(lat, lon):
            return NO_ELEVATION_M
        try:
            return self.elevation_at(GeodeticCoordinate(latitude=lat, longitude=lon))
        except TransformError as e:
            logger.warning("Cannot reproject (%.6f, %.6f): %s", lat, lon, e)
            return NO_ELEVATION_M
        except ElevationError as e:
            logger.warning("Elevation lookup failed at (%.6f, %.6f): %s", lat, lon, e)
            return NO_ELEVATION_M

    def elevation_at(self, coordinate: GeodeticCoordinate) -> float:
        """Strict lookup.

        Raises:
            OutOfCoverageError: Coordinate outside the bounding box
            TransformError: Reprojection failed
        """
        if not self._bounds.contains(coordinate.latitude, coordinate.longitude):
            raise OutOfCoverageError(coordinate.latitude, coordinate.longitude, self._bounds)

        projected = self._transformer.transform(coordinate)
        easting, northing = projected.rounded()
        return interpolate(
            self._sample, easting, northing, self._resolution, self._interpolation
        )

    def release(self) -> None:
        """Drop all cached tiles (host teardown)."""
        self._cache.clear()

    def __enter__(self) -> "ElevationProvider":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    # -------- internals --------

    def _sample(self, easting: int, northing: int) -> float | None:
        # Keys are only defined for the non-negative projected quadrant
        if easting < 0 or northing < 0:
            return None
        return self._cache.sample(easting, northing)
