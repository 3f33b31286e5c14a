"""
Boundary mapping from backend rows to TradeLeg.

The backend has shipped the same field under several names over time
(script/symbol, type/order_type, exit_price/sell_avg_price, ...).
All alias probing happens here so the formulas only ever see TradeLeg.
"""
from typing import Any, Dict, Mapping, Optional

from tradecost.core.entities.rates import Segment
from tradecost.core.entities.trade import Side, TradeLeg
from tradecost.core.use_cases.cost_calculator import to_float, to_float_or_none

SYMBOL_KEYS = ("script", "symbol", "tradingsymbol")
SIDE_KEYS = ("type", "order_type", "side", "entry_side", "entrySide", "activity_type", "action")
SEGMENT_KEYS = ("segment", "product", "trade_segment", "order_segment", "Segment")
DATETIME_KEYS = ("datetime", "updated_at", "created_at", "time", "date")


def pick(row: Mapping[str, Any], *keys: str) -> Any:
    """First alias present with a non-empty value."""
    for key in keys:
        value = row.get(key)
        if value is not None and value != "":
            return value
    return None


def normalize_symbol(row: Mapping[str, Any]) -> str:
    return str(pick(row, *SYMBOL_KEYS) or "").strip().upper()


def normalize_segment(raw: Any) -> Segment:
    s = str(raw or "").strip().lower()
    if "intra" in s or "mis" in s:
        return Segment.INTRADAY
    # cnc / "c" / delivery, and anything unknown
    return Segment.DELIVERY


def classify_side(raw: Any, short_first: bool = False, quantity: Optional[float] = None) -> Side:
    s = str(raw or "").strip().upper()
    if short_first or "SELL" in s or s == "EXIT":
        return Side.SELL
    if not s and quantity is not None and quantity < 0:
        return Side.SELL
    return Side.BUY


def quote_price(quotes: Optional[Mapping[str, Any]], symbol: str) -> Optional[float]:
    if not quotes or not symbol:
        return None
    q = quotes.get(symbol)
    if isinstance(q, Mapping):
        q = q.get("price")
    return to_float_or_none(q)


def normalize_position(
    row: Mapping[str, Any],
    quotes: Optional[Mapping[str, Any]] = None,
    is_order: bool = False,
) -> TradeLeg:
    """
    Orders/positions row -> TradeLeg.
    Open orders are priced at their trigger price when one is set.
    """
    symbol = normalize_symbol(row)
    raw_qty = to_float(row.get("qty"))

    if is_order:
        entry = to_float_or_none(row.get("trigger_price"))
        if entry is None:
            entry = to_float(row.get("price"))
    else:
        entry = to_float(pick(row, "price", "entry_price", "avg_price", "buy_price"))

    exit_price = to_float_or_none(pick(row, "exit_price", "sell_avg_price"))

    live = quote_price(quotes, symbol)
    if live is None:
        live = to_float_or_none(pick(row, "live_price", "current_price"))

    return TradeLeg(
        side=classify_side(pick(row, *SIDE_KEYS), bool(row.get("short_first")), raw_qty),
        segment=normalize_segment(pick(row, *SEGMENT_KEYS)),
        quantity=abs(raw_qty),
        entry_price=entry,
        exit_price=exit_price,
        live_price=live,
        is_closed=bool(row.get("inactive")) and exit_price is not None,
        symbol=symbol,
        opened_at=str(pick(row, *DATETIME_KEYS) or ""),
    )


def normalize_holding(row: Mapping[str, Any], quotes: Optional[Mapping[str, Any]] = None) -> TradeLeg:
    """
    Portfolio holding -> TradeLeg. Holdings are always delivery,
    a negative quantity without an explicit side is a short.
    """
    symbol = normalize_symbol(row)
    raw_qty = to_float(row.get("qty"))
    entry = to_float(pick(row, "entry_price", "avg_price"))

    live = to_float_or_none(row.get("current_price"))
    if live is None:
        live = quote_price(quotes, symbol)
    if live is None:
        live = to_float_or_none(row.get("avg_price"))

    return TradeLeg(
        side=classify_side(row.get("side"), quantity=raw_qty),
        segment=Segment.DELIVERY,
        quantity=abs(raw_qty),
        entry_price=entry,
        live_price=live,
        symbol=symbol,
        opened_at=str(pick(row, *DATETIME_KEYS) or ""),
    )


def normalize_closed_trade(row: Mapping[str, Any]) -> TradeLeg:
    """History row (buy/sell pair of a finished trade) -> closed TradeLeg."""
    entry_side = pick(row, "entry_side", "entrySide")
    return TradeLeg(
        side=classify_side(entry_side, bool(row.get("short_first"))),
        segment=normalize_segment(pick(row, *SEGMENT_KEYS)),
        quantity=abs(to_float(row.get("buy_qty"))),
        entry_price=to_float(row.get("buy_price")),
        exit_price=to_float(pick(row, "exit_price", "sell_avg_price")),
        is_closed=True,
        symbol=normalize_symbol(row),
        opened_at=str(pick(row, "buy_date", *DATETIME_KEYS) or ""),
    )


def backend_overrides(row: Mapping[str, Any]) -> Dict[str, Optional[float]]:
    """Values the backend already computed for a closed trade, if any."""
    return {
        "additional_cost": to_float_or_none(row.get("additional_cost")),
        "net_investment": to_float_or_none(row.get("net_investment")),
        "exit_net_investment": to_float_or_none(row.get("exit_net_investment")),
    }
