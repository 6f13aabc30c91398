"""Policy modules for the policy cost curve calculator."""

from .fixed_tax import FixedTax, TaxPolicyError

__all__ = [
    "FixedTax",
    "TaxPolicyError",
]
