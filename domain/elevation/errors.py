"""Elevation Bounded Context - Error Hierarchy.

Custom exceptions for elevation lookups.

Per-query errors (OutOfCoverageError, TransformError) are raised by the strict
lookup path and absorbed by the provider facade. Construction errors
(NoValidTransformError, UnknownResolutionError, AcquisitionError) are fatal.
Missing tiles and missing samples are not errors: they surface as ``None``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.elevation.value_objects import BoundingBox


class ElevationError(Exception):
    """Base error for elevation operations."""


class OutOfCoverageError(ElevationError):
    """Coordinate lies outside the dataset's bounding box.

    Attributes:
        latitude: Query latitude in degrees
        longitude: Query longitude in degrees
        bounds: The dataset's BoundingBox
    """

    def __init__(self, latitude: float, longitude: float, bounds: "BoundingBox") -> None:
        self.latitude = latitude
        self.longitude = longitude
        self.bounds = bounds
        super().__init__(
            f"Point ({latitude:.6f}, {longitude:.6f}) outside coverage "
            f"[lat: {bounds.min_lat:.6f} to {bounds.max_lat:.6f}, "
            f"lon: {bounds.min_lon:.6f} to {bounds.max_lon:.6f}]"
        )


# ---------------------------------------------------------------------------
# Reprojection
# ---------------------------------------------------------------------------
class TransformError(ElevationError):
    """Reprojecting a single coordinate failed."""


class IllegalCoordinateError(TransformError):
    """Coordinate is outside the valid domain of the selected operation."""


class OperationFailedError(TransformError):
    """The geodesy backend failed while applying the operation."""


class NoValidTransformError(ElevationError):
    """No candidate operation reproduced the anchor point for a frame pair.

    Attributes:
        source_crs: Source frame identifier
        target_crs: Target frame identifier
    """

    def __init__(self, source_crs: str, target_crs: str, reason: str = "") -> None:
        self.source_crs = source_crs
        self.target_crs = target_crs
        message = f"No valid transformation from {source_crs} to {target_crs}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Tiles and dataset
# ---------------------------------------------------------------------------
class InvalidTileError(ElevationError):
    """Tile file exists but is not a valid XYZ grid."""


class UnknownResolutionError(ElevationError):
    """Resolution has no dataset release folder."""


class AcquisitionError(ElevationError):
    """Dataset could not be downloaded or extracted."""
