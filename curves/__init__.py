"""Interpolating curves used to build abatement and cost curves."""

from .curve import (
    Curve,
    DomainExtrapolationError,
    DuplicateXError,
    PointSetCurve,
)

RegionCurveMap = dict[str, PointSetCurve]

__all__ = [
    "Curve",
    "DomainExtrapolationError",
    "DuplicateXError",
    "PointSetCurve",
    "RegionCurveMap",
]
