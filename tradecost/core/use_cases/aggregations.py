import logging
from typing import Any, Iterable, List, Mapping, Optional

from tradecost.core.entities.rates import RateSchedule, Segment
from tradecost.core.entities.trade import Side, TradeLeg
from tradecost.core.entities.valuation import LedgerRow, LegValuation, PortfolioSummary
from tradecost.core.interfaces.freeze_store import IFreezeStore
from tradecost.core.use_cases.cost_calculator import (
    compute_additional_cost,
    to_float,
    to_float_or_none,
)
from tradecost.core.use_cases.normalizer import (
    DATETIME_KEYS,
    SEGMENT_KEYS,
    backend_overrides,
    classify_side,
    normalize_closed_trade,
    normalize_segment,
    normalize_symbol,
    pick,
)
from tradecost.core.use_cases.pnl_resolver import (
    compute_pnl_pct,
    compute_pnl_per_share,
    resolve_closed_pnl,
    valuate_leg,
)
from tradecost.core.use_cases.position_valuator import compute_investment

logger = logging.getLogger(__name__)

CHARGE_KEYS = (
    "additional_tax", "additionalTax", "tax", "taxes", "charges",
    "brokerage", "fees", "total_charges",
)


def total_pnl(valuations: Iterable[LegValuation]) -> float:
    return sum(to_float(v.pnl) for v in valuations)


def summarize_portfolio(legs: List[TradeLeg], rates: RateSchedule, user: str = "") -> PortfolioSummary:
    """
    Holdings totals. Percentage is total P&L over the summed
    absolute net investments, like a single leg's percentage.
    """
    pnl_sum = 0.0
    pct_base = 0.0
    invested = 0.0
    current = 0.0

    for leg in legs:
        # Holdings are delivery whatever the row says
        if leg.segment != Segment.DELIVERY:
            leg = leg.model_copy(update={"segment": Segment.DELIVERY})
        v = valuate_leg(leg, rates)
        invested += v.net_investment
        signed = -v.live_value if leg.side == Side.SELL else v.live_value
        current += signed
        pnl_sum += v.pnl
        pct_base += abs(v.net_investment)

    return PortfolioSummary(
        user=user,
        holdings=len(legs),
        total_invested=invested,
        current_value=current,
        total_pnl=pnl_sum,
        total_pnl_pct=compute_pnl_pct(pnl_sum, pct_base),
    )


def valuate_closed_trade(
    row: Mapping[str, Any],
    rates: RateSchedule,
    freeze_store: Optional[IFreezeStore] = None,
    user: str = "",
) -> LegValuation:
    """
    History row valuation. Values the backend already computed
    (additional_cost, net_investment, exit_net_investment) take precedence.
    """
    leg = normalize_closed_trade(row)
    valuation = valuate_leg(leg, rates, freeze_store, user)

    overrides = {k: v for k, v in backend_overrides(row).items() if v is not None}
    if not overrides:
        return valuation

    merged = valuation.model_copy(update=overrides)
    pnl = resolve_closed_pnl(
        leg.side,
        merged.investment,
        merged.exit_investment or 0.0,
        merged.net_investment,
        merged.exit_net_investment or 0.0,
        merged.additional_cost,
    )
    return merged.model_copy(update={
        "pnl": pnl,
        "pnl_pct": compute_pnl_pct(pnl, merged.net_investment),
        "pnl_per_share": compute_pnl_per_share(pnl, leg.quantity),
    })


def _ledger_segment_label(raw: Any) -> str:
    if not str(raw or "").strip():
        return "—"
    return "Intraday" if normalize_segment(raw) == Segment.INTRADAY else "Delivery"


def build_activity_ledger(rows: Iterable[Mapping[str, Any]], rates: RateSchedule) -> List[LedgerRow]:
    """
    One ledger line per backend activity (ADD, EXIT, SELL_FIRST, ...),
    newest first. Charges and net investment come from the backend when
    it sent them and are computed from the rate schedule otherwise.
    """
    ledger: List[LedgerRow] = []

    for a in rows:
        activity = str(pick(a, "activity_type", "action") or "").strip().upper()
        side = classify_side(activity)
        qty = to_float(a.get("qty"))
        price = to_float_or_none(a.get("price"))
        raw_segment = pick(a, *SEGMENT_KEYS)

        investment = None
        if qty > 0 and price is not None:
            investment = compute_investment(qty, price)

        charges = to_float_or_none(pick(a, *CHARGE_KEYS))
        if charges is None and investment is not None:
            charges = compute_additional_cost(rates, normalize_segment(raw_segment), investment)

        net = to_float_or_none(pick(a, "net_investment", "netInvestment"))
        if net is None and investment is not None:
            net = investment - (charges or 0.0) if side == Side.SELL else investment + (charges or 0.0)

        ledger.append(LedgerRow(
            datetime=str(pick(a, *DATETIME_KEYS) or "").strip(),
            symbol=normalize_symbol(a),
            activity=activity or "—",
            side=side,
            segment=_ledger_segment_label(raw_segment),
            quantity=qty,
            price=price,
            gross_investment=investment,
            additional_cost=charges,
            net_investment=net,
            notes=str(a.get("notes") or ""),
        ))

    # ISO-like timestamps sort correctly as strings
    ledger.sort(key=lambda r: r.datetime, reverse=True)
    return ledger


def format_money(value: Any) -> str:
    """
    Rupee display with Indian digit grouping (12,34,567.89).
    Missing or non-finite values render as an em dash.
    """
    n = to_float_or_none(value)
    if n is None:
        return "—"

    sign = "-" if n < 0 else ""
    whole, frac = f"{abs(n):.2f}".split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])
    return f"₹{sign}{whole}.{frac}"
