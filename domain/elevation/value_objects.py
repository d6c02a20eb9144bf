"""Elevation Bounded Context - Value Objects.

Immutable data structures for geodetic queries and projected elevation tiles.
All validation occurs at construction time via Pydantic.

Frames:
    Geodetic coordinates are WGS84 degrees (EPSG:4326).
    Projected coordinates are ETRS89 / UTM zone 32N meters (EPSG:25832).
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Dataset coverage (Hamburg DGM)
# ---------------------------------------------------------------------------
HAMBURG_MIN_LAT = 53.369689
HAMBURG_MIN_LON = 9.693330
HAMBURG_MAX_LAT = 53.759930
HAMBURG_MAX_LON = 10.345204


class InterpolationMode(str, Enum):
    """How four corner samples become one elevation."""

    BILINEAR = "bilinear"
    SNAPPED = "snapped"


# ---------------------------------------------------------------------------
# Coordinates
# ---------------------------------------------------------------------------
class GeodeticCoordinate(BaseModel):
    """Query coordinate in WGS84 degrees (Value Object).

    Invariants:
        GC-1: latitude in [-90, 90]
        GC-2: longitude in [-180, 180]
    """

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

    model_config = ConfigDict(frozen=True)


class ProjectedCoordinate(BaseModel):
    """Planar coordinate in the dataset's projected frame (Value Object)."""

    easting: float  # meters
    northing: float  # meters

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_finite(self) -> "ProjectedCoordinate":
        if not (math.isfinite(self.easting) and math.isfinite(self.northing)):
            raise ValueError(
                f"Projected coordinate must be finite: ({self.easting}, {self.northing})"
            )
        return self

    def rounded(self) -> tuple[int, int]:
        """Return (easting, northing) rounded half-up to whole meters."""
        return (
            int(math.floor(self.easting + 0.5)),
            int(math.floor(self.northing + 0.5)),
        )


class BoundingBox(BaseModel):
    """Geographic coverage of the dataset in EPSG:4326 (Value Object).

    Used only for the fast-reject before any reprojection happens.
    """

    min_lat: float  # Southern boundary
    min_lon: float  # Western boundary
    max_lat: float  # Northern boundary
    max_lon: float  # Eastern boundary

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_bounds(self) -> "BoundingBox":
        if not (-90 <= self.min_lat <= 90):
            raise ValueError(f"min_lat latitude out of range: {self.min_lat}")
        if not (-90 <= self.max_lat <= 90):
            raise ValueError(f"max_lat latitude out of range: {self.max_lat}")
        if not (-180 <= self.min_lon <= 180):
            raise ValueError(f"min_lon longitude out of range: {self.min_lon}")
        if not (-180 <= self.max_lon <= 180):
            raise ValueError(f"max_lon longitude out of range: {self.max_lon}")
        if not (self.min_lat < self.max_lat):
            raise ValueError(
                f"Invalid lat ordering: min_lat={self.min_lat} >= max_lat={self.max_lat}"
            )
        if not (self.min_lon < self.max_lon):
            raise ValueError(
                f"Invalid lon ordering: min_lon={self.min_lon} >= max_lon={self.max_lon}"
            )
        return self

    @classmethod
    def hamburg(cls) -> "BoundingBox":
        """Coverage of the Hamburg DGM release."""
        return cls(
            min_lat=HAMBURG_MIN_LAT,
            min_lon=HAMBURG_MIN_LON,
            max_lat=HAMBURG_MAX_LAT,
            max_lon=HAMBURG_MAX_LON,
        )

    def contains(self, latitude: float, longitude: float) -> bool:
        """Inclusive containment check. NaN is never contained."""
        return (
            self.min_lat <= latitude <= self.max_lat
            and self.min_lon <= longitude <= self.max_lon
        )


# ---------------------------------------------------------------------------
# Tiles
# ---------------------------------------------------------------------------
class RegionKey(BaseModel):
    """Identifies the on-disk tile a projected sample lives in (Value Object).

    The prefixes are the leading decimal digits of the integer easting and
    northing, mirroring the dataset's file naming convention.
    """

    easting_prefix: str = Field(pattern=r"^\d+$")
    northing_prefix: str = Field(pattern=r"^\d+$")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.easting_prefix}_{self.northing_prefix}"


class SampleGrid(BaseModel):
    """Elevation samples of one tile keyed by integer projected coordinate.

    The mapping is an owned, read-only copy of what the loader produced.
    Missing keys are gaps in the data, not errors.
    """

    key: RegionKey
    resolution: int = Field(gt=0)  # meters between adjacent samples
    samples: MappingProxyType

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator("samples", mode="before")
    @classmethod
    def freeze_samples(cls, value: Any) -> MappingProxyType:
        if isinstance(value, MappingProxyType):
            return value
        if isinstance(value, Mapping):
            return MappingProxyType(dict(value))
        raise ValueError(f"samples must be a mapping, got {type(value).__name__}")

    @classmethod
    def empty(cls, key: RegionKey, resolution: int) -> "SampleGrid":
        return cls(key=key, resolution=resolution, samples={})

    def sample(self, easting: int, northing: int) -> float | None:
        """Return the elevation stored at (easting, northing), or None."""
        return self.samples.get((easting, northing))

    def __len__(self) -> int:
        return len(self.samples)
