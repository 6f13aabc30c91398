"""Simple deterministic scenario stub used for tests and development."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from curves import PointSetCurve
from policy.fixed_tax import FixedTax

from .interface import NO_MARKET_PRICE, RUN_ALL_PERIODS, Modeltime

LOGGER = logging.getLogger(__name__)

GLOBAL_REGION: str = "global"

_DEFAULT_YEARS: tuple[int, ...] = (2005, 2010, 2015, 2020, 2025, 2030, 2035, 2040, 2045, 2050)


@dataclass(frozen=True)
class RegionResponse:
    """Linear emissions response of one region to a carbon tax.

    Unconstrained emissions grow geometrically from ``base_emissions`` in the
    first model year at ``growth`` per year. A tax ``t`` abates ``slope * t``
    of them, never pushing emissions below zero.
    """

    base_emissions: float
    slope: float
    growth: float = 0.0

    def __post_init__(self) -> None:
        if self.base_emissions < 0.0:
            raise ValueError("base_emissions cannot be negative")
        if self.slope < 0.0:
            raise ValueError("slope cannot be negative")
        if self.growth <= -1.0:
            raise ValueError("growth must be greater than -1")

    def unconstrained(self, years_elapsed: int) -> float:
        return float(self.base_emissions) * (1.0 + float(self.growth)) ** years_elapsed

    def emissions(self, years_elapsed: int, tax: float) -> float:
        return max(0.0, self.unconstrained(years_elapsed) - float(self.slope) * float(tax))


class StubScenario:
    """Deterministic scenario honouring the :class:`SimulationFacade` contract.

    Parameters
    ----------
    regions:
        Mapping of region name to its :class:`RegionResponse`.
    policy_taxes:
        Per-region, per-period tax of the original policy. ``None`` models a
        run without any policy market, in which case :meth:`get_price`
        reports :data:`NO_MARKET_PRICE`.
    modeltime:
        Period to year mapping; defaults to five-year periods 2005-2050.
    failing_tags:
        Run tags for which :meth:`run` reports failure after computing
        results, used to exercise partial sweep failures.
    include_global:
        Whether the snapshot maps carry a ``"global"`` reporting region.
    """

    def __init__(
        self,
        regions: Mapping[str, RegionResponse],
        policy_taxes: Mapping[str, Sequence[float]] | None = None,
        *,
        name: str = "stub",
        gas: str = "CO2",
        modeltime: Modeltime | None = None,
        failing_tags: Iterable[str] = (),
        include_global: bool = True,
    ) -> None:
        if not regions:
            raise ValueError("StubScenario requires at least one region")
        if GLOBAL_REGION in regions:
            raise ValueError(f"Region name {GLOBAL_REGION!r} is reserved")
        self._name = str(name)
        self.gas = str(gas)
        self._modeltime = modeltime or Modeltime(_DEFAULT_YEARS)
        self.regions = dict(regions)
        self.include_global = bool(include_global)
        self.failing_tags = {str(tag) for tag in failing_tags}

        self._policy_taxes: dict[str, tuple[float, ...]] | None = None
        if policy_taxes is not None:
            self._policy_taxes = {}
            for region in self.regions:
                base = FixedTax(self.gas, region, tuple(policy_taxes.get(region, ())))
                self._policy_taxes[region] = tuple(
                    base.tax_for_period(period) for period in range(self._modeltime.max_period)
                )

        self._fixed_taxes: dict[str, FixedTax] = {}
        self._quantities: dict[str, list[float]] | None = None
        self._prices: dict[str, list[float]] | None = None
        self.run_log: list[tuple[str, bool]] = []

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any], **overrides: Any) -> "StubScenario":
        """Build a stub from a ``[scenario]`` style configuration mapping.

        ``config`` holds ``years`` (list of model years), ``regions`` (region
        name to a table with ``base_emissions``, ``slope`` and optional
        ``growth``), and optionally ``policy_tax`` (region name to a list of
        per-period taxes) and ``name``.
        """

        raw_regions = config.get("regions")
        if not isinstance(raw_regions, Mapping) or not raw_regions:
            raise ValueError("scenario configuration requires a 'regions' table")
        regions = {
            str(region): RegionResponse(
                base_emissions=float(entry.get("base_emissions", 0.0)),
                slope=float(entry.get("slope", 0.0)),
                growth=float(entry.get("growth", 0.0)),
            )
            for region, entry in raw_regions.items()
        }
        years = config.get("years")
        modeltime = Modeltime(tuple(years)) if years else None
        policy_taxes = config.get("policy_tax")
        kwargs: dict[str, Any] = {
            "name": config.get("name", "stub"),
            "modeltime": modeltime,
            "failing_tags": config.get("failing_tags", ()),
        }
        kwargs.update(overrides)
        return cls(regions, policy_taxes, **kwargs)

    @property
    def name(self) -> str:
        return self._name

    @property
    def modeltime(self) -> Modeltime:
        return self._modeltime

    @property
    def has_policy(self) -> bool:
        return self._policy_taxes is not None

    def _years_elapsed(self, period: int) -> int:
        return self._modeltime.period_to_year(period) - self._modeltime.start_year

    def _tax(self, region: str, period: int) -> float:
        fixed = self._fixed_taxes.get(region)
        if fixed is not None:
            return fixed.tax_for_period(period)
        if self._policy_taxes is None:
            return 0.0
        return self._policy_taxes[region][period]

    def set_tax(self, policy: FixedTax) -> None:
        """Fix the tax of ``policy.region``, replacing the original policy there."""

        if policy.gas != self.gas:
            LOGGER.warning("Ignoring tax on unmodelled gas %s", policy.gas)
            return
        if policy.region not in self.regions and policy.region != GLOBAL_REGION:
            raise KeyError(f"Unknown region {policy.region!r}")
        self._fixed_taxes[policy.region] = policy

    def run(
        self,
        scope: int = RUN_ALL_PERIODS,
        use_full_output: bool = True,
        run_tag: str = "",
    ) -> bool:
        """Solve every period up to ``scope`` and report whether it succeeded."""

        max_period = self._modeltime.max_period
        if scope == RUN_ALL_PERIODS:
            last_period = max_period - 1
        elif 0 <= scope < max_period:
            last_period = scope
        else:
            raise ValueError(f"Invalid run scope {scope!r}")

        if self._quantities is None or self._prices is None:
            self._quantities = {region: [0.0] * max_period for region in self.regions}
            self._prices = {region: [0.0] * max_period for region in self.regions}

        for region, response in self.regions.items():
            for period in range(last_period + 1):
                tax = self._tax(region, period)
                self._prices[region][period] = tax
                self._quantities[region][period] = response.emissions(
                    self._years_elapsed(period), tax
                )

        tag = str(run_tag)
        success = tag not in self.failing_tags
        self.run_log.append((tag, bool(use_full_output)))
        if not success:
            LOGGER.warning("Scenario %s failed to solve for run %r", self._name, tag)
        return success

    def _require_results(self) -> tuple[dict[str, list[float]], dict[str, list[float]]]:
        if self._quantities is None or self._prices is None:
            raise RuntimeError(f"Scenario {self._name!r} has not been run")
        return self._quantities, self._prices

    def get_price(self, gas: str, region: str, period: int) -> float:
        """Return the market price, or :data:`NO_MARKET_PRICE` where no market exists."""

        if gas != self.gas or self._policy_taxes is None or region not in self.regions:
            return NO_MARKET_PRICE
        if not 0 <= period < self._modeltime.max_period:
            return NO_MARKET_PRICE
        if self._prices is None:
            return self._tax(region, period)
        return self._prices[region][period]

    def _curves(self, values: Mapping[str, Sequence[float]], label: str, combine) -> dict[str, PointSetCurve]:
        years = self._modeltime.years
        curves = {
            region: PointSetCurve(zip(years, series), title=f"{region} {label}")
            for region, series in values.items()
        }
        if self.include_global:
            combined = [combine([values[region][p] for region in values]) for p in range(len(years))]
            curves[GLOBAL_REGION] = PointSetCurve(zip(years, combined), title=f"{GLOBAL_REGION} {label}")
        return curves

    def get_emissions_quantity_curves(self, gas: str) -> dict[str, PointSetCurve]:
        """Return year to emissions curves for every region."""

        quantities, _ = self._require_results()
        if gas != self.gas:
            return {}
        return self._curves(quantities, f"{gas} emissions", sum)

    def get_emissions_price_curves(self, gas: str) -> dict[str, PointSetCurve]:
        """Return year to tax curves for every region."""

        _, prices = self._require_results()
        if gas != self.gas:
            return {}
        return self._curves(prices, f"{gas} price", lambda values: sum(values) / len(values))


__all__ = ["GLOBAL_REGION", "RegionResponse", "StubScenario"]
