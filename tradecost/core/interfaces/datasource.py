from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class IDataSource(ABC):
    """
    The paper-trading backend. Rows are returned raw;
    the normalizer maps them to TradeLeg.
    """

    @abstractmethod
    async def get_rates(self, user: str, strict: bool = False) -> Optional[dict]:
        """
        Returns the raw brokerage settings saved for the user,
        or None when nothing is saved or the backend is unreachable.
        With `strict`, a failed read raises BackendError instead.
        """
        pass

    @abstractmethod
    async def save_rates(self, user: str, rates: dict) -> None:
        pass

    @abstractmethod
    async def get_open_orders(self, user: str) -> List[dict]:
        pass

    @abstractmethod
    async def get_positions(self, user: str) -> List[dict]:
        pass

    @abstractmethod
    async def get_history(self, user: str) -> List[dict]:
        pass

    @abstractmethod
    async def get_activity(self, user: str) -> List[dict]:
        pass

    @abstractmethod
    async def get_holdings(self, user: str) -> List[dict]:
        pass

    @abstractmethod
    async def get_quotes(self, symbols: List[str]) -> Dict[str, float]:
        """Symbol -> last price. Symbols without a usable price are omitted."""
        pass
