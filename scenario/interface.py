"""Interfaces for the simulation driven by the cost curve calculator."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from curves import PointSetCurve
from policy.fixed_tax import FixedTax

# Price reported by :meth:`SimulationFacade.get_price` when no market exists
# for the requested gas and region.
NO_MARKET_PRICE: float = sys.float_info.max

# Run scope asking the simulation to solve every model period.
RUN_ALL_PERIODS: int = -1


@dataclass(frozen=True)
class Modeltime:
    """Mapping between model periods and calendar years.

    Attributes
    ----------
    years:
        Calendar year of each model period, strictly increasing. Period ``p``
        corresponds to ``years[p]``.
    """

    years: tuple[int, ...]

    def __post_init__(self) -> None:
        years = tuple(int(year) for year in self.years)
        if not years:
            raise ValueError("Modeltime requires at least one period")
        if any(later <= earlier for earlier, later in zip(years, years[1:])):
            raise ValueError(f"Modeltime years must be strictly increasing (received {years})")
        object.__setattr__(self, "years", years)

    @classmethod
    def from_range(cls, start_year: int, end_year: int, step: int) -> "Modeltime":
        """Return a modeltime with periods every ``step`` years, both ends included."""

        if step <= 0:
            raise ValueError("Period step must be positive")
        return cls(tuple(range(int(start_year), int(end_year) + 1, int(step))))

    @property
    def max_period(self) -> int:
        return len(self.years)

    @property
    def start_year(self) -> int:
        return self.years[0]

    @property
    def end_year(self) -> int:
        return self.years[-1]

    def period_to_year(self, period: int) -> int:
        """Return the calendar year of ``period``."""

        if not 0 <= period < len(self.years):
            raise IndexError(f"Period {period} outside [0, {len(self.years)})")
        return self.years[period]

    def year_to_period(self, year: int) -> int:
        """Return the period whose calendar year is ``year``."""

        try:
            return self.years.index(int(year))
        except ValueError as exc:
            raise KeyError(f"Year {year} is not a model year") from exc


@runtime_checkable
class SimulationFacade(Protocol):
    """Contract of the simulation consumed by the cost curve calculator.

    Region curve maps returned by the snapshot accessors must be fresh copies
    owned by the caller; the calculator stores them across later runs.
    """

    @property
    def name(self) -> str: ...

    @property
    def modeltime(self) -> Modeltime: ...

    def get_price(self, gas: str, region: str, period: int) -> float: ...

    def get_emissions_quantity_curves(self, gas: str) -> dict[str, PointSetCurve]: ...

    def get_emissions_price_curves(self, gas: str) -> dict[str, PointSetCurve]: ...

    def set_tax(self, policy: FixedTax) -> None: ...

    def run(self, scope: int = RUN_ALL_PERIODS, use_full_output: bool = True, run_tag: str = "") -> bool: ...


__all__ = ["Modeltime", "NO_MARKET_PRICE", "RUN_ALL_PERIODS", "SimulationFacade"]
