"""Build per-period cost-versus-abatement curves from sweep results."""
from __future__ import annotations

from collections.abc import Mapping, Sequence

from curves import PointSetCurve
from scenario.interface import Modeltime

RegionCurves = dict[str, PointSetCurve]

# Trial whose emissions every abatement is measured from: the zero-tax run.
REFERENCE_TRIAL: int = 0


class RegionSetMismatchError(ValueError):
    """Raised when trial snapshots do not cover the same regions."""


def _check_region_sets(
    regions: Sequence[str],
    quantity_curves: Sequence[Mapping[str, PointSetCurve]],
    price_curves: Sequence[Mapping[str, PointSetCurve]],
) -> None:
    expected = set(regions)
    for trial, (quantities, prices) in enumerate(zip(quantity_curves, price_curves)):
        for label, snapshot in (("quantity", quantities), ("price", prices)):
            missing = sorted(expected - set(snapshot))
            if missing:
                raise RegionSetMismatchError(
                    f"Trial {trial} {label} curves are missing regions {missing}; "
                    "every trial must cover the baseline region set"
                )


def build_period_cost_curves(
    quantity_curves: Sequence[Mapping[str, PointSetCurve]],
    price_curves: Sequence[Mapping[str, PointSetCurve]],
    modeltime: Modeltime,
) -> list[RegionCurves]:
    """Return, for every period, a cost curve per region.

    Each curve holds one point per trial: x is the abatement of that trial
    relative to the zero-tax trial and y the tax the trial faced. Regions are
    those of the baseline snapshot, the last entry of ``quantity_curves``.
    Trials are added in order of rising tax, so when abatement saturates and
    several trials share an x value the lowest tax reaching it is kept.

    Raises
    ------
    RegionSetMismatchError
        If any trial lacks a region of the baseline snapshot.
    """

    if not quantity_curves or len(quantity_curves) != len(price_curves):
        raise ValueError("quantity and price curves must hold the same, non-zero number of trials")

    baseline = quantity_curves[-1]
    regions = list(baseline)
    _check_region_sets(regions, quantity_curves, price_curves)

    reference = quantity_curves[REFERENCE_TRIAL]
    period_curves: list[RegionCurves] = []
    for period in range(modeltime.max_period):
        year = modeltime.period_to_year(period)
        curves: RegionCurves = {}
        for region in regions:
            reference_quantity = reference[region].get_y(year)
            curve = PointSetCurve(
                title=f"{region} period cost curve",
                numerical_label=period,
                on_duplicate="keep",
            )
            for trial in range(len(quantity_curves)):
                reduction = reference_quantity - quantity_curves[trial][region].get_y(year)
                tax = price_curves[trial][region].get_y(year)
                curve.add_point(reduction, tax)
            curves[region] = curve
        period_curves.append(curves)
    return period_curves


__all__ = ["REFERENCE_TRIAL", "RegionSetMismatchError", "build_period_cost_curves"]
