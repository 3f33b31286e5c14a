import math

import pytest

from tradecost.core.entities.trade import Side, TradeLeg
from tradecost.core.use_cases.position_valuator import (
    compute_investment,
    compute_live_value,
    compute_net_investment,
    value_entry,
    value_exit,
)


@pytest.mark.parametrize("investment,cost", [(1000, 1.1), (0, 20), (-500, 3.5), (1e7, 0)])
def test_net_investment_identities(investment, cost):
    assert compute_net_investment(Side.BUY, investment, cost) - cost == pytest.approx(investment)
    assert compute_net_investment(Side.SELL, investment, cost) + cost == pytest.approx(investment)


def test_net_investment_treats_missing_values_as_zero():
    assert compute_net_investment(Side.BUY, None, math.nan) == 0


def test_investment_guards_non_finite():
    assert compute_investment(10, 100) == 1000
    assert compute_investment(10, None) == 0
    assert compute_investment(math.inf, 100) == 0


def test_entry_buy_delivery(default_rates):
    leg = TradeLeg(side=Side.BUY, segment="delivery", quantity=10, entry_price=100)
    entry = value_entry(leg, default_rates)
    assert entry.investment == pytest.approx(1000)
    assert entry.additional_cost == pytest.approx(1.1)
    assert entry.net_investment == pytest.approx(1001.1)


def test_entry_sell_intraday(default_rates):
    leg = TradeLeg(side=Side.SELL, segment="intraday", quantity=5, entry_price=200)
    entry = value_entry(leg, default_rates)
    assert entry.investment == pytest.approx(1000)
    assert entry.additional_cost == pytest.approx(20.18)
    assert entry.net_investment == pytest.approx(979.82)


@pytest.mark.parametrize("side", [Side.BUY, Side.SELL])
def test_exit_net_investment_subtracts_exit_charges_for_both_sides(default_rates, side):
    leg = TradeLeg(side=side, segment="intraday", quantity=5, entry_price=200,
                   exit_price=180, is_closed=True)
    exit_ = value_exit(leg, default_rates)
    assert exit_.exit_investment == pytest.approx(900)
    assert exit_.exit_additional_cost == pytest.approx(20 + 900 * 0.00018)
    assert exit_.exit_net_investment == pytest.approx(900 - 20.162)


def test_live_value_uses_quote_when_present():
    leg = TradeLeg(side=Side.BUY, quantity=10, entry_price=100, live_price=110)
    assert compute_live_value(leg) == pytest.approx(1100)


def test_live_value_falls_back_to_entry_price():
    leg = TradeLeg(side=Side.BUY, quantity=10, entry_price=100)
    assert compute_live_value(leg) == pytest.approx(1000)
