from typing import List, Optional

from pydantic import BaseModel

from tradecost.core.entities.trade import Lifecycle, Side


class FrozenClose(BaseModel):
    """
    Values captured the first time a closed leg is valued.
    Later rate edits must not change them.
    """
    entry_additional_cost: float
    exit_additional_cost: float
    additional_cost: float
    net_investment: float
    exit_net_investment: float
    frozen_at_ms: int


class LegValuation(BaseModel):
    """
    Display values for one trade leg.
    Exit fields are only populated for closed legs.
    """
    symbol: str = ""
    side: Side
    lifecycle: Lifecycle
    quantity: float
    investment: float
    entry_additional_cost: float
    additional_cost: float
    net_investment: float
    live_value: float
    exit_investment: Optional[float] = None
    exit_additional_cost: Optional[float] = None
    exit_net_investment: Optional[float] = None
    pnl: float
    pnl_pct: float
    pnl_per_share: float
    frozen: bool = False


class ValuationsResponse(BaseModel):
    user: str
    total_pnl: float
    legs: List[LegValuation]


class PortfolioSummary(BaseModel):
    """
    Aggregated holdings view. Holdings are always valued as delivery.
    """
    user: str = ""
    holdings: int
    total_invested: float
    current_value: float
    total_pnl: float
    total_pnl_pct: float


class LedgerRow(BaseModel):
    datetime: str
    symbol: str
    activity: str
    side: Side
    segment: str
    quantity: float
    price: Optional[float] = None
    gross_investment: Optional[float] = None
    additional_cost: Optional[float] = None
    net_investment: Optional[float] = None
    notes: str = ""
