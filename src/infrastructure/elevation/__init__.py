"""Infrastructure adapters for the elevation bounded context.

This module provides the infrastructure layer implementations for elevation
lookups: reprojection with pyproj, XYZ tile loading, the tile cache, dataset
acquisition and the provider facade.

Adapters exported for simplified imports.
"""

from .projection import PyprojTransformer, TransformRegistry
from .provider import ElevationProvider
from .tile_cache import ABSENT, TileCache
from .xyz_adapter import XyzTileAdapter

__all__ = [
    "ABSENT",
    "ElevationProvider",
    "PyprojTransformer",
    "TileCache",
    "TransformRegistry",
    "XyzTileAdapter",
]
