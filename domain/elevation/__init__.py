"""Elevation Bounded Context.

Responsible for ground elevation lookups over a projected tile dataset:
- Value Objects: GeodeticCoordinate, ProjectedCoordinate, BoundingBox,
  RegionKey, SampleGrid
- Services: region_key, bilinear_interpolate, snapped_elevation
"""
