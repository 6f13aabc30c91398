"""Tests for the piecewise-linear point set curve."""

from __future__ import annotations

import math

import numpy as np
import pytest

from curves import DomainExtrapolationError, DuplicateXError, PointSetCurve


def test_points_stay_sorted_regardless_of_insertion_order() -> None:
    curve = PointSetCurve()
    for x, y in [(5.0, 50.0), (-1.0, 3.0), (10.0, 1.0), (2.5, 7.0)]:
        curve.add_point(x, y)

    assert curve.xs == [-1.0, 2.5, 5.0, 10.0]
    assert curve.ys == [3.0, 7.0, 50.0, 1.0]
    assert curve.min_x == -1.0
    assert curve.max_x == 10.0
    assert len(curve) == 4


def test_get_y_interpolates_linearly_between_neighbours() -> None:
    curve = PointSetCurve([(0.0, 0.0), (10.0, 20.0), (20.0, 0.0)])

    assert curve.get_y(0.0) == pytest.approx(0.0)
    assert curve.get_y(2.5) == pytest.approx(5.0)
    assert curve.get_y(10.0) == pytest.approx(20.0)
    assert curve.get_y(15.0) == pytest.approx(10.0)


def test_get_y_outside_domain_follows_extrapolation_policy() -> None:
    strict = PointSetCurve([(0.0, 1.0), (1.0, 2.0)], title="strict")
    flat = PointSetCurve([(0.0, 1.0), (1.0, 2.0)], extrapolation="flat")

    with pytest.raises(DomainExtrapolationError):
        strict.get_y(1.5)
    with pytest.raises(DomainExtrapolationError):
        strict.get_y(-0.1)
    assert flat.get_y(-3.0) == pytest.approx(1.0)
    assert flat.get_y(7.0) == pytest.approx(2.0)

    with pytest.raises(DomainExtrapolationError):
        PointSetCurve(extrapolation="flat").get_y(0.0)


def test_duplicate_x_policies() -> None:
    strict = PointSetCurve([(1.0, 1.0)])
    with pytest.raises(DuplicateXError):
        strict.add_point(1.0, 2.0)
    assert strict.points() == [(1.0, 1.0)]

    replacing = PointSetCurve([(1.0, 1.0), (2.0, 2.0)], on_duplicate="replace")
    replacing.add_point(1.0, 5.0)
    assert replacing.points() == [(1.0, 5.0), (2.0, 2.0)]

    keeping = PointSetCurve([(1.0, 1.0), (2.0, 2.0)], on_duplicate="keep")
    keeping.add_point(1.0, 5.0)
    assert keeping.points() == [(1.0, 1.0), (2.0, 2.0)]
    assert keeping.copy().on_duplicate == "keep"


def test_invalid_policies_and_values_are_rejected() -> None:
    with pytest.raises(ValueError):
        PointSetCurve(extrapolation="linear")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        PointSetCurve(on_duplicate="ignore")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        PointSetCurve().add_point(float("nan"), 1.0)
    with pytest.raises(ValueError):
        PointSetCurve().add_point("abc", 1.0)  # type: ignore[arg-type]


def test_integral_of_triangle() -> None:
    curve = PointSetCurve([(0.0, 0.0), (10.0, 10.0)])

    assert curve.get_integral(0.0, 10.0) == pytest.approx(50.0)
    assert curve.get_integral(0.0, 5.0) == pytest.approx(12.5)
    assert curve.get_integral(5.0, 10.0) == pytest.approx(37.5)


def test_integral_clamps_bounds_to_sampled_domain() -> None:
    curve = PointSetCurve([(0.0, 0.0), (10.0, 10.0)])

    assert curve.get_integral(0.0, None) == pytest.approx(50.0)
    assert curve.get_integral(0.0, math.inf) == pytest.approx(50.0)
    assert curve.get_integral(-100.0, 1e300) == pytest.approx(50.0)
    assert curve.get_integral(20.0, 30.0) == 0.0


def test_integral_edge_cases() -> None:
    curve = PointSetCurve([(0.0, 2.0), (4.0, 2.0), (6.0, 0.0)])

    assert curve.get_integral(6.0, 0.0) == pytest.approx(-10.0)
    assert curve.get_integral(3.0, 3.0) == 0.0
    assert PointSetCurve().get_integral(0.0, 10.0) == 0.0
    assert PointSetCurve([(1.0, 5.0)]).get_integral(0.0, None) == 0.0


def test_discounted_value_with_zero_rate_matches_integral() -> None:
    curve = PointSetCurve([(2005, 100.0), (2010, 400.0), (2015, 900.0), (2020, 1600.0)])

    assert curve.get_discounted_value(2005, 2020, 0.0) == pytest.approx(
        curve.get_integral(2005, 2020), rel=1e-12
    )


def test_discounted_value_of_constant_curve_matches_closed_form() -> None:
    curve = PointSetCurve([(0.0, 1.0), (10.0, 1.0)])
    rate = 0.05
    k = math.log(1.0 + rate)

    expected = (1.0 - (1.0 + rate) ** -10.0) / k

    assert curve.get_discounted_value(0.0, 10.0, rate) == pytest.approx(expected, rel=1e-12)


def test_discounted_value_matches_numerical_quadrature() -> None:
    curve = PointSetCurve([(2005, 0.0), (2010, 50.0), (2030, 20.0)])
    rate = 0.07

    grid = np.linspace(2005.0, 2030.0, 200_001)
    values = np.interp(grid, curve.xs, curve.ys) * (1.0 + rate) ** -(grid - 2005.0)
    numeric = float(np.sum(0.5 * (values[1:] + values[:-1]) * np.diff(grid)))

    assert curve.get_discounted_value(2005, 2030, rate) == pytest.approx(numeric, rel=1e-6)


def test_discounted_value_is_measured_at_requested_start() -> None:
    curve = PointSetCurve([(2010.0, 1.0), (2020.0, 1.0)])
    rate = 0.05

    from_2010 = curve.get_discounted_value(2010, 2020, rate)
    from_2000 = curve.get_discounted_value(2000, 2020, rate)

    assert from_2000 == pytest.approx(from_2010 * (1.0 + rate) ** -10.0, rel=1e-12)
    with pytest.raises(ValueError):
        curve.get_discounted_value(2010, 2020, -1.0)


def test_reversed_discount_bounds_measure_value_at_x_low() -> None:
    curve = PointSetCurve([(2010.0, 1.0), (2020.0, 3.0)])
    rate = 0.04

    forward = curve.get_discounted_value(2010, 2020, rate)
    reversed_value = curve.get_discounted_value(2020, 2010, rate)

    assert reversed_value == pytest.approx(-forward * (1.0 + rate) ** 10.0, rel=1e-12)


def test_metadata_and_copy() -> None:
    curve = PointSetCurve([(1.0, 2.0)])
    curve.set_title("USA period cost curve")
    curve.set_numerical_label(3)

    clone = curve.copy()
    clone.add_point(2.0, 4.0)

    assert curve.title == "USA period cost curve"
    assert curve.numerical_label == 3
    assert clone.title == curve.title
    assert len(curve) == 1
    assert len(clone) == 2
    assert curve != clone
    assert PointSetCurve.from_mapping({1.0: 2.0}) == curve


def test_to_element_lists_data_points() -> None:
    curve = PointSetCurve([(1.0, 2.0), (0.0, 0.5)], title="USA", numerical_label=2)

    element = curve.to_element()

    assert element.tag == "PointSetCurve"
    assert element.get("name") == "USA"
    assert element.get("label") == "2"
    xs = [float(point.findtext("x")) for point in element.findall("DataPoint")]
    ys = [float(point.findtext("y")) for point in element.findall("DataPoint")]
    assert xs == [0.0, 1.0]
    assert ys == [0.5, 2.0]
