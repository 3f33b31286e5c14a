import math
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from tradecost.core.entities.rates import Segment


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"  # also short / sell-first entries


class Lifecycle(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class TradeLeg(BaseModel):
    """
    Standardised trade leg used throughout the core logic.
    Built from a backend row by the normalizer, never mutated afterwards.
    """
    side: Side
    segment: Segment = Segment.DELIVERY
    quantity: float
    entry_price: float
    exit_price: Optional[float] = None
    live_price: Optional[float] = None
    is_closed: bool = False
    symbol: str = ""
    opened_at: str = ""

    class Config:
        frozen = True

    @property
    def lifecycle(self) -> Lifecycle:
        if self.is_closed and self.exit_price is not None:
            return Lifecycle.CLOSED
        return Lifecycle.ACTIVE

    def freeze_key(self, user: str) -> str:
        """Immutable identifier of a closed leg, stable across re-fetches."""
        exit_px = "" if self.exit_price is None else _num(self.exit_price)
        return "|".join([
            user or "",
            self.symbol.upper(),
            self.segment.value,
            self.side.value,
            self.opened_at,
            _num(self.quantity),
            _num(self.entry_price),
            exit_px,
        ])


def _num(v: float) -> str:
    # 100.0 and 100 must produce the same key
    if not math.isfinite(v):
        return "0"
    return str(int(v)) if v == int(v) else repr(v)
