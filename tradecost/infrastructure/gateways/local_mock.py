from typing import Dict, List, Optional

from tradecost.core.interfaces.datasource import IDataSource


class LocalMockDataSource(IDataSource):
    """In-memory backend for local runs and tests."""

    def __init__(
        self,
        rates: Optional[Dict[str, dict]] = None,
        orders: Optional[Dict[str, List[dict]]] = None,
        positions: Optional[Dict[str, List[dict]]] = None,
        history: Optional[Dict[str, List[dict]]] = None,
        activity: Optional[Dict[str, List[dict]]] = None,
        holdings: Optional[Dict[str, List[dict]]] = None,
        quotes: Optional[Dict[str, float]] = None,
    ):
        self.rates = rates if rates is not None else {}
        self.orders = orders or {}
        self.positions = positions or {}
        self.history = history or {}
        self.activity = activity or {}
        self.holdings = holdings or {}
        self.quotes = quotes or {}

    async def get_rates(self, user: str, strict: bool = False) -> Optional[dict]:
        saved = self.rates.get(user)
        return dict(saved) if saved is not None else None

    async def save_rates(self, user: str, rates: dict) -> None:
        self.rates[user] = dict(rates)

    async def get_open_orders(self, user: str) -> List[dict]:
        return list(self.orders.get(user, []))

    async def get_positions(self, user: str) -> List[dict]:
        return list(self.positions.get(user, []))

    async def get_history(self, user: str) -> List[dict]:
        return list(self.history.get(user, []))

    async def get_activity(self, user: str) -> List[dict]:
        return list(self.activity.get(user, []))

    async def get_holdings(self, user: str) -> List[dict]:
        return list(self.holdings.get(user, []))

    async def get_quotes(self, symbols: List[str]) -> Dict[str, float]:
        wanted = {s.upper() for s in symbols}
        return {s: p for s, p in self.quotes.items() if s in wanted}
