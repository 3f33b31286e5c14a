from typing import NamedTuple, Optional

from tradecost.core.entities.rates import RateSchedule
from tradecost.core.entities.trade import Side, TradeLeg
from tradecost.core.use_cases.cost_calculator import compute_additional_cost, to_float


class EntryValues(NamedTuple):
    investment: float
    additional_cost: float
    net_investment: float


class ExitValues(NamedTuple):
    exit_investment: float
    exit_additional_cost: float
    exit_net_investment: float


def compute_investment(quantity: float, price: Optional[float]) -> float:
    return to_float(to_float(quantity) * to_float(price))


def compute_net_investment(side: Side, investment: float, additional_cost: float) -> float:
    # BUY: costs raise the cost basis. SELL: costs reduce the proceeds.
    investment = to_float(investment)
    additional_cost = to_float(additional_cost)
    if side == Side.BUY:
        return investment + additional_cost
    return investment - additional_cost


def value_entry(leg: TradeLeg, rates: RateSchedule) -> EntryValues:
    investment = compute_investment(leg.quantity, leg.entry_price)
    cost = compute_additional_cost(rates, leg.segment, investment)
    return EntryValues(investment, cost, compute_net_investment(leg.side, investment, cost))


def value_exit(leg: TradeLeg, rates: RateSchedule) -> ExitValues:
    """
    Exit leg of a closed trade, valued at the exit price.
    Exit net investment is exit proceeds minus exit charges for both sides.
    """
    exit_investment = compute_investment(leg.quantity, leg.exit_price)
    cost = compute_additional_cost(rates, leg.segment, exit_investment)
    return ExitValues(exit_investment, cost, exit_investment - cost)


def compute_live_value(leg: TradeLeg) -> float:
    # No quote yet: mark at entry so the row shows only its charges as P&L.
    price = leg.live_price if leg.live_price is not None else leg.entry_price
    return compute_investment(leg.quantity, price)
