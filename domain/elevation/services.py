"""Elevation Bounded Context - Domain Services.

Pure domain logic for turning corner samples into an elevation estimate.
NO I/O operations - tiles are resolved through a ``SampleAccessor`` supplied
by the caller (see `src/infrastructure/elevation/provider.py`).
"""

from __future__ import annotations

import math
from collections.abc import Callable

from domain.elevation.value_objects import InterpolationMode, RegionKey

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
EASTING_PREFIX_DIGITS = 3  # "551" for easting 551120 -> 1 km columns
NORTHING_PREFIX_DIGITS = 4  # "5930" for northing 5930000 -> 1 km rows

# Elevation used for corners without data (no-data conflated with sea level)
UNKNOWN_ELEVATION_M = 0.0

SampleAccessor = Callable[[int, int], float | None]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from -inf (0.5 -> 1)."""
    return int(math.floor(value + 0.5))


def region_key(easting: int, northing: int) -> RegionKey:
    """Derive the tile key for an integer projected coordinate.

    The key truncates each axis to its leading digits, which ties key
    granularity to the dataset's tiling scheme rather than query precision.
    """
    if easting < 0 or northing < 0:
        raise ValueError(f"Negative projected coordinate: ({easting}, {northing})")
    return RegionKey(
        easting_prefix=str(easting)[:EASTING_PREFIX_DIGITS],
        northing_prefix=str(northing)[:NORTHING_PREFIX_DIGITS],
    )


def bracketing_cell(
    x: float, y: float, resolution: int
) -> tuple[int, int, int, int]:
    """Return (x1, x2, y1, y2): the grid lines surrounding (x, y).

    x1 == x2 (or y1 == y2) when the point lies exactly on a grid line.
    """
    if resolution <= 0:
        raise ValueError("resolution must be positive")
    x1 = resolution * math.floor(x / resolution)
    x2 = resolution * math.ceil(x / resolution)
    y1 = resolution * math.floor(y / resolution)
    y2 = resolution * math.ceil(y / resolution)
    return int(x1), int(x2), int(y1), int(y2)


def _known(value: float | None) -> float:
    return UNKNOWN_ELEVATION_M if value is None else float(value)


# ---------------------------------------------------------------------------
# Bilinear Interpolation
# ---------------------------------------------------------------------------
def bilinear_interpolate(
    sample_at: SampleAccessor, x: float, y: float, resolution: int
) -> float:
    """Interpolate elevation at (x, y) from the four surrounding samples.

    Corners are q11=(x1,y1), q21=(x2,y1), q12=(x1,y2), q22=(x2,y2).
    A corner without data contributes 0.

    Shortcuts:
        - (x, y) on a corner returns that corner's value unchanged
        - x1 == x2 degrades to linear interpolation along y (q11 -> q12)
        - y1 == y2 degrades to linear interpolation along x using q11/q12

    Args:
        sample_at: Returns the stored elevation for an integer coordinate
        x: Easting in meters
        y: Northing in meters
        resolution: Grid spacing in meters

    Returns:
        Elevation in meters
    """
    x1, x2, y1, y2 = bracketing_cell(x, y, resolution)

    q11 = _known(sample_at(x1, y1))
    q21 = _known(sample_at(x2, y1))
    q12 = _known(sample_at(x1, y2))
    q22 = _known(sample_at(x2, y2))

    # Direct match, no interpolation required
    if x == x1 and y == y1:
        return q11
    if x == x1 and y == y2:
        return q12
    if x == x2 and y == y1:
        return q21
    if x == x2 and y == y2:
        return q22

    # Point on a grid line: linear interpolation along the other axis
    if x1 == x2:
        return q11 + (y - y1) * ((q12 - q11) / (y2 - y1))
    if y1 == y2:
        # q12 coincides with q11 here, so this yields q11
        return q11 + (x - x1) * ((q12 - q11) / (x2 - x1))

    width = x2 - x1
    height = y2 - y1
    r1 = (x2 - x) / width * q11 + (x - x1) / width * q21
    r2 = (x2 - x) / width * q12 + (x - x1) / width * q22
    return (y2 - y) / height * r1 + (y - y1) / height * r2


# ---------------------------------------------------------------------------
# Snapped (nearest sample)
# ---------------------------------------------------------------------------
def snapped_elevation(
    sample_at: SampleAccessor, x: float, y: float, resolution: int
) -> float:
    """Return the sample nearest to (x, y), rounding each axis independently."""
    if resolution <= 0:
        raise ValueError("resolution must be positive")
    x_snapped = resolution * round_half_up(x / resolution)
    y_snapped = resolution * round_half_up(y / resolution)
    return _known(sample_at(x_snapped, y_snapped))


def interpolate(
    sample_at: SampleAccessor,
    x: float,
    y: float,
    resolution: int,
    mode: InterpolationMode = InterpolationMode.BILINEAR,
) -> float:
    """Dispatch to the configured interpolation mode."""
    if mode is InterpolationMode.SNAPPED:
        return snapped_elevation(sample_at, x, y, resolution)
    return bilinear_interpolate(sample_at, x, y, resolution)
