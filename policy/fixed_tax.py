"""Fixed per-period carbon tax schedules applied to a scenario."""
from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


class TaxPolicyError(ValueError):
    """Error raised when a fixed tax schedule is invalid."""


def _coerce_tax(value: Any, period: int) -> float:
    """Return ``value`` as a finite, non-negative tax for ``period``."""

    if value in (None, ""):
        raise TaxPolicyError(f"Tax for period {period} is missing")
    try:
        tax = float(value)
    except (TypeError, ValueError) as exc:
        raise TaxPolicyError(
            f"Tax for period {period} must be numeric (received {value!r})"
        ) from exc
    if not math.isfinite(tax):
        raise TaxPolicyError(f"Tax for period {period} must be finite")
    if tax < 0.0:
        raise TaxPolicyError(f"Tax for period {period} cannot be negative")
    return tax


@dataclass(frozen=True)
class FixedTax:
    """A fixed tax on ``gas`` in ``region`` for every model period.

    Attributes
    ----------
    gas:
        Name of the taxed gas, e.g. ``"CO2"``.
    region:
        Region the tax applies to.
    taxes:
        Tax per model period, indexed by period.
    """

    gas: str
    region: str
    taxes: tuple[float, ...]

    def __post_init__(self) -> None:
        if not str(self.gas).strip():
            raise TaxPolicyError("Gas name must not be empty")
        if not str(self.region).strip():
            raise TaxPolicyError("Region name must not be empty")
        if isinstance(self.taxes, (str, bytes)) or not isinstance(self.taxes, Sequence):
            raise TaxPolicyError("taxes must be a sequence of per-period values")
        normalized = tuple(_coerce_tax(value, period) for period, value in enumerate(self.taxes))
        object.__setattr__(self, "taxes", normalized)

    @classmethod
    def scaled(
        cls, gas: str, region: str, base_taxes: Sequence[float], fraction: float
    ) -> "FixedTax":
        """Return the policy taxing each period at ``fraction`` of ``base_taxes``."""

        try:
            factor = float(fraction)
        except (TypeError, ValueError) as exc:
            raise TaxPolicyError(f"Tax fraction must be numeric (received {fraction!r})") from exc
        if not 0.0 <= factor <= 1.0:
            raise TaxPolicyError(f"Tax fraction must lie in [0, 1] (received {factor!r})")
        return cls(gas, region, tuple(float(tax) * factor for tax in base_taxes))

    def tax_for_period(self, period: int) -> float:
        """Return the tax in ``period``; periods past the schedule are untaxed."""

        if 0 <= period < len(self.taxes):
            return self.taxes[period]
        return 0.0


__all__ = ["FixedTax", "TaxPolicyError"]
