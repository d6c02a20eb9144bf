"""Coordinate reprojection between the query frame and the dataset frame.

pyproj may offer several candidate operations for one frame pair (different
datum realizations or shift grids). Only one matches the dataset's
convention, so each supported pair carries an anchor check in a
TransformRegistry: a source point with a known output range. At
construction every candidate is applied to the anchor and the first one
landing inside the range is fixed for the transformer's lifetime.

Axis order is always x/y (lon/lat, easting/northing) via ``always_xy=True``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict, model_validator
from pyproj import Transformer
from pyproj.exceptions import CRSError, ProjError
from pyproj.transformer import TransformerGroup

from domain.elevation.errors import (
    IllegalCoordinateError,
    NoValidTransformError,
    OperationFailedError,
)
from domain.elevation.value_objects import GeodeticCoordinate, ProjectedCoordinate

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
class AxisRange(BaseModel):
    """Open interval (low, high) an anchor output must fall into."""

    low: float
    high: float

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_order(self) -> "AxisRange":
        if not self.low < self.high:
            raise ValueError(f"Empty range: ({self.low}, {self.high})")
        return self

    def contains(self, value: float) -> bool:
        return self.low < value < self.high


class AnchorCheck(BaseModel):
    """Known-answer test that identifies the correct operation for a frame pair.

    A candidate passes when its output for ``anchor`` lies inside at least
    one of the configured axis ranges.
    """

    source_crs: str
    target_crs: str
    anchor: tuple[float, float]  # source frame, x/y order
    x_range: AxisRange | None = None
    y_range: AxisRange | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_ranges(self) -> "AnchorCheck":
        if self.x_range is None and self.y_range is None:
            raise ValueError("AnchorCheck needs an x_range or a y_range")
        return self

    def accepts(self, x: float, y: float) -> bool:
        if self.x_range is not None and self.x_range.contains(x):
            return True
        return self.y_range is not None and self.y_range.contains(y)


# WGS84 <-> ETRS89 / UTM 32N, anchored on a point in Hamburg
WGS84_TO_UTM32N = AnchorCheck(
    source_crs="EPSG:4326",
    target_crs="EPSG:25832",
    anchor=(9.770968020290818, 53.51644661059623),
    x_range=AxisRange(low=551100.0, high=551200.0),
)
UTM32N_TO_WGS84 = AnchorCheck(
    source_crs="EPSG:25832",
    target_crs="EPSG:4326",
    anchor=(551120.0, 5930000.0),
    x_range=AxisRange(low=9.770, high=9.771),
)


class TransformRegistry:
    """Frame pair -> AnchorCheck lookup table."""

    def __init__(self, checks: Iterable[AnchorCheck] = ()) -> None:
        self._checks: dict[tuple[str, str], AnchorCheck] = {}
        for check in checks:
            self.register(check)

    @classmethod
    def default(cls) -> "TransformRegistry":
        return cls([WGS84_TO_UTM32N, UTM32N_TO_WGS84])

    def register(self, check: AnchorCheck) -> None:
        self._checks[(check.source_crs.upper(), check.target_crs.upper())] = check

    def lookup(self, source_crs: str, target_crs: str) -> AnchorCheck:
        try:
            return self._checks[(source_crs.upper(), target_crs.upper())]
        except KeyError:
            raise NoValidTransformError(
                source_crs, target_crs, "frame pair is not registered"
            ) from None

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        return (str(pair[0]).upper(), str(pair[1]).upper()) in self._checks


# ---------------------------------------------------------------------------
# Candidate selection
# ---------------------------------------------------------------------------
def candidate_transformers(source_crs: str, target_crs: str) -> list[Transformer]:
    """Return every operation pyproj can instantiate for the frame pair."""
    try:
        group = TransformerGroup(source_crs, target_crs, always_xy=True)
    except (CRSError, ProjError) as e:
        raise NoValidTransformError(source_crs, target_crs, str(e)) from e
    if group.unavailable_operations:
        logger.debug(
            "%d operations %s -> %s unavailable (missing grids)",
            len(group.unavailable_operations),
            source_crs,
            target_crs,
        )
    return list(group.transformers)


def select_transformer(
    candidates: Sequence[Transformer], check: AnchorCheck
) -> Transformer:
    """Return the first candidate that passes ``check``.

    Raises:
        NoValidTransformError: If no candidate reproduces the anchor
    """
    for index, candidate in enumerate(candidates):
        try:
            x, y = candidate.transform(*check.anchor, errcheck=True)
        except ProjError as e:
            logger.debug("Candidate %d failed on anchor: %s", index, e)
            continue
        if check.accepts(x, y):
            logger.info(
                "Selected operation %s -> %s: %s",
                check.source_crs,
                check.target_crs,
                candidate.description,
            )
            return candidate
        logger.debug(
            "Candidate %d (%s) rejected: anchor -> (%.6f, %.6f)",
            index,
            candidate.description,
            x,
            y,
        )

    logger.error(
        "None of %d candidates %s -> %s passed the anchor check",
        len(candidates),
        check.source_crs,
        check.target_crs,
    )
    raise NoValidTransformError(
        check.source_crs,
        check.target_crs,
        f"none of {len(candidates)} candidate operations reproduced the anchor",
    )


# ---------------------------------------------------------------------------
# Transformer
# ---------------------------------------------------------------------------
class PyprojTransformer:
    """CoordinateTransformer backed by one verified pyproj operation.

    Parameters
    ----------
    source_crs, target_crs: str
        Frame identifiers understood by pyproj (e.g. "EPSG:4326").
    registry: TransformRegistry | None
        Anchor checks; defaults to TransformRegistry.default().
    """

    def __init__(
        self,
        source_crs: str = "EPSG:4326",
        target_crs: str = "EPSG:25832",
        registry: TransformRegistry | None = None,
    ) -> None:
        self.source_crs = source_crs
        self.target_crs = target_crs
        self.registry = registry if registry is not None else TransformRegistry.default()
        check = self.registry.lookup(source_crs, target_crs)
        self._transformer = select_transformer(
            candidate_transformers(source_crs, target_crs), check
        )
        self._inverse: PyprojTransformer | None = None

    @property
    def definition(self) -> str:
        """PROJ definition of the selected operation."""
        return self._transformer.definition

    @property
    def description(self) -> str:
        return self._transformer.description

    def transform_xy(self, x: float, y: float) -> tuple[float, float]:
        """Apply the selected operation to a source-frame x/y pair.

        Raises:
            OperationFailedError: If PROJ reports an error
            IllegalCoordinateError: If the result is not finite
        """
        try:
            out_x, out_y = self._transformer.transform(x, y, errcheck=True)
        except ProjError as e:
            raise OperationFailedError(
                f"{self.source_crs} -> {self.target_crs} failed for ({x}, {y}): {e}"
            ) from e
        if not (math.isfinite(out_x) and math.isfinite(out_y)):
            raise IllegalCoordinateError(
                f"({x}, {y}) outside the domain of {self.source_crs} -> {self.target_crs}"
            )
        return float(out_x), float(out_y)

    def transform(self, coordinate: GeodeticCoordinate) -> ProjectedCoordinate:
        easting, northing = self.transform_xy(coordinate.longitude, coordinate.latitude)
        return ProjectedCoordinate(easting=easting, northing=northing)

    def inverse(self) -> "PyprojTransformer":
        """Transformer for the reverse frame pair (built once, on demand)."""
        if self._inverse is None:
            self._inverse = PyprojTransformer(
                self.target_crs, self.source_crs, registry=self.registry
            )
        return self._inverse

    def inverse_transform(self, coordinate: ProjectedCoordinate) -> GeodeticCoordinate:
        lon, lat = self.inverse().transform_xy(coordinate.easting, coordinate.northing)
        return GeodeticCoordinate(latitude=lat, longitude=lon)
