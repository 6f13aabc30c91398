"""Turn period cost curves into regional and global policy costs."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from curves import PointSetCurve
from scenario.interface import Modeltime

LOGGER = logging.getLogger(__name__)

# Reporting-only region that would double count the regional totals.
GLOBAL_REGION: str = "global"


@dataclass(frozen=True)
class CostAggregation:
    """Regional and global policy costs derived from period cost curves."""

    regional_cost_curves: dict[str, PointSetCurve] = field(default_factory=dict)
    regional_costs: dict[str, float] = field(default_factory=dict)
    regional_discounted_costs: dict[str, float] = field(default_factory=dict)
    global_cost: float = 0.0
    global_discounted_cost: float = 0.0


def period_cost(curve: PointSetCurve) -> float:
    """Return the area under a cost curve from zero abatement to its largest sample."""

    return curve.get_integral(0.0, None)


def aggregate_costs(
    period_curves: Sequence[Mapping[str, PointSetCurve]],
    modeltime: Modeltime,
    *,
    start_year: int,
    discount_rate: float,
) -> CostAggregation:
    """Integrate period cost curves over abatement and then over time.

    For each region the area under every period's cost curve becomes one point
    of a year-to-cost curve. That curve is integrated from ``start_year`` to
    the last model year, undiscounted and discounted at ``discount_rate``.
    The ``"global"`` region is skipped.
    """

    if not period_curves:
        return CostAggregation()

    end_year = modeltime.end_year
    if start_year > end_year:
        LOGGER.warning(
            "Discount start year %s is after the last model year %s; costs will be zero.",
            start_year,
            end_year,
        )

    curves: dict[str, PointSetCurve] = {}
    costs: dict[str, float] = {}
    discounted: dict[str, float] = {}
    global_cost = 0.0
    global_discounted = 0.0

    for region in period_curves[0]:
        if region == GLOBAL_REGION:
            continue
        cost_curve = PointSetCurve(title=region)
        for period in range(modeltime.max_period):
            year = modeltime.period_to_year(period)
            cost_curve.add_point(year, period_cost(period_curves[period][region]))

        regional_cost = cost_curve.get_integral(start_year, end_year)
        discounted_cost = cost_curve.get_discounted_value(start_year, end_year, discount_rate)
        LOGGER.debug(
            "Region %s: undiscounted cost %.6g, discounted cost %.6g",
            region,
            regional_cost,
            discounted_cost,
        )

        curves[region] = cost_curve
        costs[region] = regional_cost
        discounted[region] = discounted_cost
        global_cost += regional_cost
        global_discounted += discounted_cost

    return CostAggregation(
        regional_cost_curves=curves,
        regional_costs=costs,
        regional_discounted_costs=discounted,
        global_cost=global_cost,
        global_discounted_cost=global_discounted,
    )


__all__ = ["CostAggregation", "GLOBAL_REGION", "aggregate_costs", "period_cost"]
