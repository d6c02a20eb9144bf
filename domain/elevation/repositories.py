"""Domain Port(s) for Elevation I/O.

Defines interfaces (Protocols) that infrastructure adapters must implement.
No concrete I/O here.
"""

from __future__ import annotations

from typing import Protocol

from .value_objects import (
    GeodeticCoordinate,
    ProjectedCoordinate,
    RegionKey,
    SampleGrid,
)


class TileRepository(Protocol):
    """Port for locating and loading elevation tiles.

    Implementations live in infrastructure (e.g., XYZ adapter).
    """

    resolution: int  # meters between samples of every tile

    def tile_exists(self, key: RegionKey) -> bool:
        """Return True if a tile file is stored for ``key``."""
        ...

    def load_tile(self, key: RegionKey) -> SampleGrid:
        """Parse the tile for ``key`` into a SampleGrid."""
        ...


class CoordinateTransformer(Protocol):
    """Port for reprojecting query coordinates into the dataset frame."""

    def transform(self, coordinate: GeodeticCoordinate) -> ProjectedCoordinate:
        """Reproject ``coordinate``; raises TransformError on failure."""
        ...
