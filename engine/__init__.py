"""Policy cost curve engine."""

from .aggregation import CostAggregation, aggregate_costs
from .outputs import CostCurveOutputs
from .period_curves import RegionSetMismatchError, build_period_cost_curves
from .total_policy_cost import TotalPolicyCostCalculator
from .trial_sweep import SweepResult, TrialOutcome, run_trials

__all__ = [
    "CostAggregation",
    "CostCurveOutputs",
    "RegionSetMismatchError",
    "SweepResult",
    "TotalPolicyCostCalculator",
    "TrialOutcome",
    "aggregate_costs",
    "build_period_cost_curves",
    "run_trials",
]
