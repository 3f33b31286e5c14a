from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class ValuationRequest(BaseModel):
    """
    Rows the caller already holds, valued without a backend round trip.
    `rates` replaces the user's saved schedule when given.
    """
    rows: List[dict] = Field(default_factory=list)
    quotes: Dict[str, float] = Field(default_factory=dict)
    kind: Literal["positions", "orders", "history"] = "positions"
    rates: Optional[dict] = None

    class Config:
        json_schema_extra = {
            "example": {
                "kind": "positions",
                "rows": [
                    {"script": "INFY", "type": "BUY", "segment": "delivery",
                     "qty": 10, "price": 100, "datetime": "2025-01-02 09:30:00"}
                ],
                "quotes": {"INFY": 110.0},
            }
        }


class CostRequest(BaseModel):
    investment: float
    segment: Optional[str] = None
    rates: Optional[dict] = None


class CostResponse(BaseModel):
    segment: str
    investment: float
    additional_cost: float
