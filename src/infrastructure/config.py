"""Provider settings and dataset release table.

Settings load from environment variables (prefix ``DGM_``) or a ``.env``
file. The release table maps each supported resolution to the folder name
of its upstream dataset release; supporting a new release is a data change.

Example:
    >>> from infrastructure.config import get_settings
    >>> settings = get_settings()
    >>> settings.resolution
    25

    Environment variables override defaults:
        DGM_CACHE_DIR=/data/dgm
        DGM_RESOLUTION=10
        DGM_INTERPOLATION=snapped
"""

from __future__ import annotations

import functools
import pathlib
from types import MappingProxyType

import pydantic
import pydantic_settings

from domain.elevation.value_objects import (
    HAMBURG_MAX_LAT,
    HAMBURG_MAX_LON,
    HAMBURG_MIN_LAT,
    HAMBURG_MIN_LON,
    BoundingBox,
    InterpolationMode,
)

# Resolution (m) -> release folder inside the extracted archive.
# Upstream naming follows no convention, hence the table.
DATASET_RELEASES: MappingProxyType[int, str] = MappingProxyType(
    {
        1: "dgm1_hh_2020-03-29",
        10: "dgm10_hh_2020",
        25: "dgm25_hh_2000",
    }
)

DOWNLOAD_URL_TEMPLATE = (
    "https://daten-hamburg.de/geographie_geologie_geobasisdaten/"
    "Digitales_Hoehenmodell/DGM{resolution}/dgm{resolution}_2x2km_XYZ_hh_2021_04_01.zip"
)


class ElevationSettings(pydantic_settings.BaseSettings):
    """Runtime configuration for the elevation provider.

    Attributes:
        cache_dir: Directory holding the downloaded archive and extracted tiles.
        resolution: Sample spacing in meters; one of DATASET_RELEASES.
        interpolation: Bilinear (default) or snapped lookups.
        download_url: Archive URL; derived from resolution when unset.
        download_attempts: Attempts before acquisition gives up.
        download_backoff_s: Fixed sleep between attempts.
        download_timeout_s: Per-request socket timeout.
        min_lat, min_lon, max_lat, max_lon: Dataset coverage (EPSG:4326).
        source_crs, target_crs: Query frame and dataset frame.
    """

    cache_dir: pathlib.Path = pathlib.Path("/tmp/dgm")
    resolution: int = 25
    interpolation: InterpolationMode = InterpolationMode.BILINEAR
    download_url: str | None = None
    download_attempts: int = pydantic.Field(default=3, ge=1)
    download_backoff_s: float = pydantic.Field(default=2.0, ge=0)
    download_timeout_s: float = pydantic.Field(default=10.0, gt=0)
    min_lat: float = HAMBURG_MIN_LAT
    min_lon: float = HAMBURG_MIN_LON
    max_lat: float = HAMBURG_MAX_LAT
    max_lon: float = HAMBURG_MAX_LON
    source_crs: str = "EPSG:4326"
    target_crs: str = "EPSG:25832"

    model_config = pydantic_settings.SettingsConfigDict(
        env_prefix="DGM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @pydantic.field_validator("resolution")
    @classmethod
    def validate_resolution(cls, value: int) -> int:
        if value not in DATASET_RELEASES:
            supported = ", ".join(str(r) for r in sorted(DATASET_RELEASES))
            raise ValueError(f"Unsupported resolution {value}; expected one of {supported}")
        return value

    def bounding_box(self) -> BoundingBox:
        return BoundingBox(
            min_lat=self.min_lat,
            min_lon=self.min_lon,
            max_lat=self.max_lat,
            max_lon=self.max_lon,
        )

    def resolved_download_url(self) -> str:
        if self.download_url:
            return self.download_url
        return DOWNLOAD_URL_TEMPLATE.format(resolution=self.resolution)

    @property
    def archive_path(self) -> pathlib.Path:
        """Local path of the downloaded archive."""
        return self.cache_dir / f"HH_Elevation_{self.resolution}m.zip"


@functools.lru_cache
def get_settings() -> ElevationSettings:
    """Return the process-wide settings instance (cached)."""
    return ElevationSettings()
