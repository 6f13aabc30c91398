"""Total policy cost calculation from a sweep of fixed-tax scenario runs."""
from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy.engine import Engine

from config.cost_curve_config import CostCurveConfig
from curves import PointSetCurve
from engine.aggregation import aggregate_costs
from engine.outputs import CostCurveOutputs
from engine.period_curves import build_period_cost_curves
from engine.reporting import XmlDocumentStore, export_cost_curves
from engine.trial_sweep import TrialOutcome, run_trials
from scenario.interface import NO_MARKET_PRICE, SimulationFacade

LOGGER = logging.getLogger(__name__)

# Period at which the policy market is checked for an active price, capped
# at the last period of the model.
MARKET_CHECK_PERIOD: int = 1

RegionCurves = dict[str, PointSetCurve]


class TotalPolicyCostCalculator:
    """Compute an abatement cost curve and the total cost of a policy.

    The calculator runs the scenario ``num_points`` more times with the
    policy tax scaled to ``t / num_points`` for each trial ``t``, builds a
    cost-versus-abatement curve for every period and region, and integrates
    those into regional and global costs.

    The scenario must already hold the results of the policy (baseline) run.
    That baseline is captured on the first call to
    :meth:`calculate_abatement_cost_curve` and reused by later calls, since a
    sweep leaves the scenario holding its last trial.

    Parameters
    ----------
    scenario:
        Simulation used for the trial runs. Only one calculator may drive a
        given scenario at a time.
    config:
        Calculation settings; defaults to :class:`CostCurveConfig` defaults.
    """

    def __init__(self, scenario: SimulationFacade, config: CostCurveConfig | None = None) -> None:
        if scenario is None:
            raise ValueError("TotalPolicyCostCalculator requires a scenario")
        self.scenario = scenario
        self.config = config or CostCurveConfig()
        self._baseline: tuple[RegionCurves, RegionCurves] | None = None
        self._policy_active: bool | None = None
        self._reset()

    def _reset(self) -> None:
        self.emissions_q_curves: list[RegionCurves] = []
        self.emissions_t_curves: list[RegionCurves] = []
        self.period_cost_curves: list[RegionCurves] = []
        self.regional_cost_curves: dict[str, PointSetCurve] = {}
        self.regional_costs: dict[str, float] = {}
        self.regional_discounted_costs: dict[str, float] = {}
        self.global_cost: float = 0.0
        self.global_discounted_cost: float = 0.0
        self.trial_outcomes: list[TrialOutcome] = []
        self.ran_costs: bool = False

    def _has_policy_market(self) -> bool:
        if self._policy_active is None:
            # Single-period models only have period 0.
            period = min(MARKET_CHECK_PERIOD, self.scenario.modeltime.max_period - 1)
            price = self.scenario.get_price(self.config.gas, self.config.market_region, period)
            self._policy_active = price != NO_MARKET_PRICE
        return self._policy_active

    def _baseline_snapshot(self) -> tuple[RegionCurves, RegionCurves]:
        if self._baseline is None:
            gas = self.config.gas
            self._baseline = (
                self.scenario.get_emissions_quantity_curves(gas),
                self.scenario.get_emissions_price_curves(gas),
            )
        quantities, prices = self._baseline
        return (
            {region: curve.copy() for region, curve in quantities.items()},
            {region: curve.copy() for region, curve in prices.items()},
        )

    def calculate_abatement_cost_curve(self) -> bool:
        """Run the trials and compute period, regional and global costs.

        Returns
        -------
        bool
            ``True`` when every trial solved, or when there is no policy
            market and therefore nothing to cost. ``False`` when at least one
            trial failed; the costs are still computed from all trials.

        Raises
        ------
        engine.period_curves.RegionSetMismatchError
            If a trial's curves do not cover the baseline regions.
        """

        self._reset()
        if not self._has_policy_market():
            LOGGER.info("Skipping cost curve calculations for non-policy model run.")
            return True

        config = self.config
        modeltime = self.scenario.modeltime
        baseline_quantities, baseline_prices = self._baseline_snapshot()

        sweep = run_trials(
            self.scenario,
            config.gas,
            config.num_points,
            baseline_quantities,
            baseline_prices,
        )
        self.emissions_q_curves = sweep.quantity_curves
        self.emissions_t_curves = sweep.price_curves
        self.trial_outcomes = list(sweep.outcomes)

        self.period_cost_curves = build_period_cost_curves(
            self.emissions_q_curves, self.emissions_t_curves, modeltime
        )

        costs = aggregate_costs(
            self.period_cost_curves,
            modeltime,
            start_year=config.discount_start_year,
            discount_rate=config.discount_rate,
        )
        self.regional_cost_curves = costs.regional_cost_curves
        self.regional_costs = costs.regional_costs
        self.regional_discounted_costs = costs.regional_discounted_costs
        self.global_cost = costs.global_cost
        self.global_discounted_cost = costs.global_discounted_cost

        self.ran_costs = True
        if sweep.success:
            LOGGER.info(
                "Policy cost for %s: %.6g undiscounted, %.6g discounted.",
                config.gas,
                self.global_cost,
                self.global_discounted_cost,
            )
        else:
            LOGGER.error(
                "Cost curve trials %s failed to solve; costs include their results.",
                sweep.failed_trials,
            )
        return sweep.success

    def outputs(self) -> CostCurveOutputs | None:
        """Return the results, or ``None`` when no full calculation has completed."""

        if not self.ran_costs:
            return None
        return CostCurveOutputs(
            scenario_name=self.scenario.name,
            years=tuple(self.scenario.modeltime.years),
            period_cost_curves=self.period_cost_curves,
            regional_cost_curves=self.regional_cost_curves,
            regional_costs=self.regional_costs,
            regional_discounted_costs=self.regional_discounted_costs,
            global_cost=self.global_cost,
            global_discounted_cost=self.global_discounted_cost,
            failed_trials=tuple(
                outcome.index for outcome in self.trial_outcomes if not outcome.success
            ),
        )

    def print_output(
        self,
        output_dir: str | Path = ".",
        *,
        document_store: XmlDocumentStore | None = None,
        database: str | Engine | None = None,
        csv_dir: str | Path | None = None,
    ) -> dict[str, object] | None:
        """Write the results to the XML file and any other supplied sinks.

        Does nothing and returns ``None`` when no calculation has completed.
        """

        outputs = self.outputs()
        if outputs is None:
            return None
        xml_path = Path(output_dir) / self.config.output_file_name(self.scenario.name)
        return export_cost_curves(
            outputs,
            xml_path,
            document_store=document_store,
            database=database,
            csv_dir=csv_dir,
        )


__all__ = ["MARKET_CHECK_PERIOD", "TotalPolicyCostCalculator"]
