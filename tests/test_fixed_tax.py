from __future__ import annotations

import pytest

from policy.fixed_tax import FixedTax, TaxPolicyError


def test_fixed_tax_normalizes_values() -> None:
    policy = FixedTax("CO2", "USA", [1, "2.5", 3.0])  # type: ignore[arg-type]

    assert policy.taxes == (1.0, 2.5, 3.0)
    assert policy.tax_for_period(1) == pytest.approx(2.5)
    assert policy.tax_for_period(10) == 0.0


@pytest.mark.parametrize(
    "taxes",
    [
        (1.0, -2.0),
        (1.0, None),
        (float("inf"),),
        ("abc",),
        "123",
    ],
)
def test_fixed_tax_rejects_invalid_schedules(taxes) -> None:
    with pytest.raises(TaxPolicyError):
        FixedTax("CO2", "USA", taxes)


def test_fixed_tax_requires_names() -> None:
    with pytest.raises(TaxPolicyError):
        FixedTax("", "USA", (1.0,))
    with pytest.raises(TaxPolicyError):
        FixedTax("CO2", " ", (1.0,))


def test_scaled_applies_fraction_to_every_period() -> None:
    policy = FixedTax.scaled("CO2", "China", [10.0, 20.0, 40.0], 0.25)

    assert policy.region == "China"
    assert policy.taxes == pytest.approx((2.5, 5.0, 10.0))
    assert FixedTax.scaled("CO2", "China", [10.0], 0.0).taxes == (0.0,)

    with pytest.raises(TaxPolicyError):
        FixedTax.scaled("CO2", "China", [10.0], 1.5)
