"""DGM Elevation Domain Layer.

This package contains the core logic organized by bounded contexts:
- elevation: Coordinates, tiles, interpolation of ground elevation
"""

from domain import elevation

__all__ = ["elevation"]
