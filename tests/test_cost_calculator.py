"""
Tests for the brokerage + tax calculator and the numeric coercion it relies on.
"""
import math

import pytest

from tradecost.core.entities.rates import RateSchedule, Segment
from tradecost.core.use_cases.cost_calculator import (
    compute_additional_cost,
    parse_segment,
    to_float,
    to_float_or_none,
)


@pytest.mark.parametrize("investment", [0, 1, 1000, 123456.78])
@pytest.mark.parametrize("segment", [Segment.INTRADAY, Segment.DELIVERY])
def test_pct_mode_scales_with_investment(pct_rates, segment, investment):
    expected = investment * pct_rates.brokerage_pct(segment) + investment * pct_rates.tax_pct(segment)
    assert compute_additional_cost(pct_rates, segment, investment) == pytest.approx(expected)


def test_abs_mode_brokerage_is_flat(default_rates):
    small = compute_additional_cost(default_rates, "intraday", 100)
    large = compute_additional_cost(default_rates, "intraday", 100000)

    # Only the tax part moves with the investment
    assert small == pytest.approx(20 + 100 * 0.00018)
    assert large == pytest.approx(20 + 100000 * 0.00018)
    assert large - small == pytest.approx((100000 - 100) * 0.00018)


def test_delivery_buy_scenario(default_rates):
    """BUY delivery, qty 10 @ 100, ABS defaults: only the 0.11% tax applies."""
    assert compute_additional_cost(default_rates, "delivery", 1000) == pytest.approx(1.1)


def test_intraday_sell_scenario(default_rates):
    assert compute_additional_cost(default_rates, "intraday", 1000) == pytest.approx(20.18)


@pytest.mark.parametrize("segment", [None, "", "futures", "DELIVERY"])
def test_unknown_segment_defaults_to_delivery(default_rates, segment):
    assert compute_additional_cost(default_rates, segment, 1000) == pytest.approx(1.1)


def test_segment_is_case_insensitive(default_rates):
    assert compute_additional_cost(default_rates, "IntraDay", 1000) == pytest.approx(20.18)


def test_non_finite_investment_costs_nothing(pct_rates):
    assert compute_additional_cost(pct_rates, "delivery", math.nan) == 0
    assert compute_additional_cost(pct_rates, "delivery", math.inf) == 0


def test_non_finite_investment_in_abs_mode_keeps_flat_brokerage(default_rates):
    # Investment coerces to 0, the flat fee is still charged
    assert compute_additional_cost(default_rates, "intraday", math.nan) == pytest.approx(20)


def test_negative_investment_is_passed_through(pct_rates):
    cost = compute_additional_cost(pct_rates, "delivery", -1000)
    assert cost == pytest.approx(-1000 * (0.005 + 0.0011))


def test_calculator_is_deterministic(pct_rates):
    results = {compute_additional_cost(pct_rates, "intraday", 5432.1) for _ in range(5)}
    assert len(results) == 1


@pytest.mark.parametrize("raw,expected", [
    ("12.5", 12.5), (3, 3.0), (None, 0.0), ("abc", 0.0),
    (math.nan, 0.0), (math.inf, 0.0), (True, 0.0), ("", 0.0),
])
def test_to_float(raw, expected):
    assert to_float(raw) == expected


def test_to_float_or_none():
    assert to_float_or_none(None) is None
    assert to_float_or_none("") is None
    assert to_float_or_none("nan") is None
    assert to_float_or_none("0") == 0.0


def test_parse_segment():
    assert parse_segment("intraday") is Segment.INTRADAY
    assert parse_segment(Segment.INTRADAY) is Segment.INTRADAY
    assert parse_segment("cnc") is Segment.DELIVERY


def test_rates_as_strings_are_accepted():
    rates = RateSchedule(brokerage_mode="pct", brokerage_delivery_pct="0.01", tax_delivery_pct="0")
    assert compute_additional_cost(rates, "delivery", 1000) == pytest.approx(10)
