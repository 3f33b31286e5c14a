import math
from typing import Any, Optional, Union

from tradecost.core.entities.rates import BrokerageMode, RateSchedule, Segment


def to_float(v: Any, fallback: float = 0.0) -> float:
    """Numeric coercion used by every formula: missing or non-finite -> fallback."""
    if v is None or isinstance(v, bool):
        return fallback
    try:
        n = float(v)
    except (TypeError, ValueError):
        return fallback
    return n if math.isfinite(n) else fallback


def to_float_or_none(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    n = to_float(v, fallback=math.nan)
    return None if math.isnan(n) else n


def parse_segment(segment: Union[Segment, str, None]) -> Segment:
    if isinstance(segment, Segment):
        return segment
    if str(segment or "").strip().lower() == Segment.INTRADAY.value:
        return Segment.INTRADAY
    return Segment.DELIVERY


def compute_additional_cost(
    rates: RateSchedule,
    segment: Union[Segment, str, None],
    investment: float,
) -> float:
    """
    Brokerage + tax charged on one leg.

    Brokerage is either a fraction of the investment (PCT) or a flat fee per
    order (ABS). Tax is always a fraction of the investment.
    """
    seg = parse_segment(segment)
    investment = to_float(investment)

    if rates.brokerage_mode == BrokerageMode.PCT:
        brokerage = investment * rates.brokerage_pct(seg)
    else:
        brokerage = rates.brokerage_abs(seg)

    tax = investment * rates.tax_pct(seg)
    return to_float(brokerage + tax)
