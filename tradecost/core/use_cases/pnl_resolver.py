import logging
import time
from typing import Optional

from tradecost.core.entities.rates import RateSchedule
from tradecost.core.entities.trade import Lifecycle, Side, TradeLeg
from tradecost.core.entities.valuation import FrozenClose, LegValuation
from tradecost.core.interfaces.freeze_store import IFreezeStore
from tradecost.core.use_cases.cost_calculator import to_float
from tradecost.core.use_cases.position_valuator import (
    compute_live_value,
    value_entry,
    value_exit,
)

logger = logging.getLogger(__name__)


def resolve_active_pnl(side: Side, investment: float, live_value: float, additional_cost: float) -> float:
    if side == Side.BUY:
        return to_float(live_value - investment - additional_cost)
    return to_float(investment - live_value - additional_cost)


def resolve_closed_pnl(
    side: Side,
    investment: float,
    exit_investment: float,
    net_investment: float,
    exit_net_investment: float,
    total_additional_cost: float,
) -> float:
    # BUY nets the frozen net investments, SELL nets gross investments and total cost.
    if side == Side.BUY:
        return to_float(exit_net_investment - net_investment)
    return to_float(investment - exit_investment - total_additional_cost)


def compute_pnl_pct(pnl: float, net_investment: float) -> float:
    base = abs(to_float(net_investment))
    if base == 0:
        return 0.0
    return to_float(pnl / base * 100)


def compute_pnl_per_share(pnl: float, quantity: float) -> float:
    quantity = to_float(quantity)
    if quantity == 0:
        return 0.0
    return to_float(pnl / quantity)


def valuate_leg(
    leg: TradeLeg,
    rates: RateSchedule,
    freeze_store: Optional[IFreezeStore] = None,
    user: str = "",
    now_ms: Optional[int] = None,
) -> LegValuation:
    """
    Full valuation of one leg.

    Active legs are marked to the live price and carry only the entry charges.
    Closed legs carry entry + exit charges; their costs and net investments
    are frozen on first sight when a freeze store is supplied.
    """
    entry = value_entry(leg, rates)

    if leg.lifecycle == Lifecycle.ACTIVE:
        live_value = compute_live_value(leg)
        pnl = resolve_active_pnl(leg.side, entry.investment, live_value, entry.additional_cost)
        return LegValuation(
            symbol=leg.symbol,
            side=leg.side,
            lifecycle=Lifecycle.ACTIVE,
            quantity=leg.quantity,
            investment=entry.investment,
            entry_additional_cost=entry.additional_cost,
            additional_cost=entry.additional_cost,
            net_investment=entry.net_investment,
            live_value=live_value,
            pnl=pnl,
            pnl_pct=compute_pnl_pct(pnl, entry.net_investment),
            pnl_per_share=compute_pnl_per_share(pnl, leg.quantity),
        )

    exit_ = value_exit(leg, rates)
    snapshot = FrozenClose(
        entry_additional_cost=entry.additional_cost,
        exit_additional_cost=exit_.exit_additional_cost,
        additional_cost=entry.additional_cost + exit_.exit_additional_cost,
        net_investment=entry.net_investment,
        exit_net_investment=exit_.exit_net_investment,
        frozen_at_ms=now_ms if now_ms is not None else int(time.time() * 1000),
    )

    frozen = False
    if freeze_store is not None:
        key = leg.freeze_key(user)
        stored = freeze_store.put_if_absent(key, snapshot)
        frozen = stored is not snapshot
        if frozen:
            logger.debug(f"Using frozen values for {key} (frozen at {stored.frozen_at_ms})")
        snapshot = stored

    pnl = resolve_closed_pnl(
        leg.side,
        entry.investment,
        exit_.exit_investment,
        snapshot.net_investment,
        snapshot.exit_net_investment,
        snapshot.additional_cost,
    )

    return LegValuation(
        symbol=leg.symbol,
        side=leg.side,
        lifecycle=Lifecycle.CLOSED,
        quantity=leg.quantity,
        investment=entry.investment,
        entry_additional_cost=snapshot.entry_additional_cost,
        additional_cost=snapshot.additional_cost,
        net_investment=snapshot.net_investment,
        live_value=exit_.exit_investment,
        exit_investment=exit_.exit_investment,
        exit_additional_cost=snapshot.exit_additional_cost,
        exit_net_investment=snapshot.exit_net_investment,
        pnl=pnl,
        pnl_pct=compute_pnl_pct(pnl, snapshot.net_investment),
        pnl_per_share=compute_pnl_per_share(pnl, leg.quantity),
        frozen=frozen,
    )
