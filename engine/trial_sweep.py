"""Re-run a scenario under scaled fixed taxes to sample its abatement response."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from curves import PointSetCurve
from policy.fixed_tax import FixedTax
from scenario.interface import RUN_ALL_PERIODS, SimulationFacade

LOGGER = logging.getLogger(__name__)

RegionCurves = dict[str, PointSetCurve]


@dataclass(frozen=True)
class TrialOutcome:
    """Bookkeeping for a single sweep run."""

    index: int
    fraction: float
    run_tag: str
    success: bool


@dataclass
class SweepResult:
    """Curves collected by :func:`run_trials`, indexed by trial.

    ``quantity_curves`` and ``price_curves`` hold ``num_points + 1`` entries;
    the last one is the baseline run captured before the sweep started.
    """

    quantity_curves: list[RegionCurves]
    price_curves: list[RegionCurves]
    outcomes: list[TrialOutcome] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def failed_trials(self) -> list[int]:
        return [outcome.index for outcome in self.outcomes if not outcome.success]


def trial_fraction(trial: int, num_points: int) -> float:
    """Return the share of the full policy tax applied in ``trial``."""

    if num_points < 1:
        raise ValueError("num_points must be at least 1")
    if not 0 <= trial <= num_points:
        raise ValueError(f"trial {trial} outside [0, {num_points}]")
    return float(trial) / float(num_points)


def scaled_taxes(
    scenario: SimulationFacade,
    gas: str,
    baseline_prices: Mapping[str, PointSetCurve],
    fraction: float,
) -> list[FixedTax]:
    """Return one :class:`FixedTax` per region taxing ``fraction`` of the baseline price."""

    modeltime = scenario.modeltime
    policies: list[FixedTax] = []
    for region, curve in baseline_prices.items():
        base = [curve.get_y(modeltime.period_to_year(period)) for period in range(modeltime.max_period)]
        policies.append(FixedTax.scaled(gas, region, base, fraction))
    return policies


def run_trials(
    scenario: SimulationFacade,
    gas: str,
    num_points: int,
    baseline_quantities: RegionCurves,
    baseline_prices: RegionCurves,
) -> SweepResult:
    """Run ``num_points`` trials at evenly spaced fractions of the baseline tax.

    Trial ``t`` applies ``t / num_points`` of the baseline tax to every region
    that has a baseline price curve, then runs all periods tagged with ``t``.
    A failed run is logged and recorded but the sweep continues, and its
    curves are kept. The baseline itself is stored at index ``num_points``
    and is never re-run.
    """

    if num_points < 1:
        raise ValueError("num_points must be at least 1")

    quantity_curves: list[RegionCurves] = [{} for _ in range(num_points + 1)]
    price_curves: list[RegionCurves] = [{} for _ in range(num_points + 1)]
    quantity_curves[num_points] = baseline_quantities
    price_curves[num_points] = baseline_prices
    result = SweepResult(quantity_curves, price_curves)

    for trial in range(num_points):
        fraction = trial_fraction(trial, num_points)
        # Apply every region's tax before running so the trial sees one consistent policy.
        for policy in scaled_taxes(scenario, gas, baseline_prices, fraction):
            scenario.set_tax(policy)

        run_tag = str(trial)
        LOGGER.info("Starting cost curve point run number %s.", trial)
        success = bool(scenario.run(RUN_ALL_PERIODS, True, run_tag))
        if not success:
            LOGGER.warning(
                "Cost curve point run number %s (tax fraction %.3f) did not solve; "
                "its curves are kept but may be unreliable.",
                trial,
                fraction,
            )

        quantity_curves[trial] = scenario.get_emissions_quantity_curves(gas)
        price_curves[trial] = scenario.get_emissions_price_curves(gas)
        result.outcomes.append(TrialOutcome(trial, fraction, run_tag, success))

    return result


__all__ = ["SweepResult", "TrialOutcome", "run_trials", "scaled_taxes", "trial_fraction"]
