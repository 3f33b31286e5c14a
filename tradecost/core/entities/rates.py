"""
Rate schedule entity for TradeCost.

One schedule per user session, applied uniformly to every trade leg.
"""
import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator


class BrokerageMode(str, Enum):
    ABS = "ABS"  # flat brokerage per order
    PCT = "PCT"  # brokerage as a fraction of investment


class Segment(str, Enum):
    INTRADAY = "intraday"
    DELIVERY = "delivery"


DEFAULT_RATES = {
    "brokerage_mode": "ABS",
    "brokerage_intraday_pct": 0.0005,
    "brokerage_intraday_abs": 20.0,
    "brokerage_delivery_pct": 0.005,
    "brokerage_delivery_abs": 0.0,
    "tax_intraday_pct": 0.00018,
    "tax_delivery_pct": 0.0011,
}

RATE_FIELDS = tuple(k for k in DEFAULT_RATES if k != "brokerage_mode")


class RateSchedule(BaseModel):
    """
    Brokerage and tax rates for both segments.
    Percentages are fractions (0.0011 == 0.11%).
    """
    brokerage_mode: BrokerageMode = BrokerageMode.ABS
    brokerage_intraday_pct: float = DEFAULT_RATES["brokerage_intraday_pct"]
    brokerage_intraday_abs: float = DEFAULT_RATES["brokerage_intraday_abs"]
    brokerage_delivery_pct: float = DEFAULT_RATES["brokerage_delivery_pct"]
    brokerage_delivery_abs: float = DEFAULT_RATES["brokerage_delivery_abs"]
    tax_intraday_pct: float = DEFAULT_RATES["tax_intraday_pct"]
    tax_delivery_pct: float = DEFAULT_RATES["tax_delivery_pct"]

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "brokerage_mode": "ABS",
                "brokerage_intraday_pct": 0.0005,
                "brokerage_intraday_abs": 20,
                "brokerage_delivery_pct": 0.005,
                "brokerage_delivery_abs": 0,
                "tax_intraday_pct": 0.00018,
                "tax_delivery_pct": 0.0011,
            }
        }

    @field_validator("brokerage_mode", mode="before")
    @classmethod
    def _parse_mode(cls, v: Any) -> BrokerageMode:
        # Enum members str() as "BrokerageMode.PCT"; compare on the value
        mode = str(getattr(v, "value", v) or "").strip().upper()
        return BrokerageMode.PCT if mode == "PCT" else BrokerageMode.ABS

    @field_validator(*RATE_FIELDS, mode="before")
    @classmethod
    def _parse_rate(cls, v: Any, info) -> float:
        # Backend stores rates as strings; anything unusable reverts to the default.
        default = DEFAULT_RATES[info.field_name]
        try:
            n = float(v)
        except (TypeError, ValueError):
            return default
        if not math.isfinite(n) or n < 0:
            return default
        return n

    def brokerage_pct(self, segment: Segment) -> float:
        if segment == Segment.INTRADAY:
            return self.brokerage_intraday_pct
        return self.brokerage_delivery_pct

    def brokerage_abs(self, segment: Segment) -> float:
        if segment == Segment.INTRADAY:
            return self.brokerage_intraday_abs
        return self.brokerage_delivery_abs

    def tax_pct(self, segment: Segment) -> float:
        if segment == Segment.INTRADAY:
            return self.tax_intraday_pct
        return self.tax_delivery_pct
