import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from tradecost.core.interfaces.datasource import IDataSource
from tradecost.core.use_cases.cost_calculator import to_float_or_none

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://paper-trading-backend.onrender.com"


class BackendError(Exception):
    """A write to the paper-trading backend failed."""


class BackendGateway(IDataSource):
    """
    Implementation of IDataSource for the paper-trading REST backend.

    Reads never raise: a failed read is logged and resolves to an empty
    result so pages keep rendering. Writes raise BackendError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        base = base_url or os.getenv("BACKEND_BASE_URL") or DEFAULT_BASE_URL
        self.base_url = base.strip().rstrip("/")
        self.timeout = timeout if timeout is not None else float(os.getenv("BACKEND_TIMEOUT_SECONDS", "8"))
        self._transport = transport
        logger.info(f"BackendGateway initialized. URL: {self.base_url}")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    async def _get_json(self, path: str, params: Optional[dict] = None, strict: bool = False) -> Any:
        """
        GET and decode. Failures are logged and read as None,
        or raised as BackendError when `strict` is set.
        """
        try:
            async with self._client() as client:
                resp = await client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.error(f"GET {path} failed: {e}")
            if strict:
                raise BackendError(f"GET {path} failed: {e}") from e
            return None
        if strict and resp.status_code == 404:
            return None
        if resp.status_code != 200:
            logger.warning(f"GET {path} returned HTTP {resp.status_code}")
            if strict:
                raise BackendError(f"GET {path} returned HTTP {resp.status_code}")
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"GET {path} returned invalid JSON: {e}")
            if strict:
                raise BackendError(f"GET {path} returned invalid JSON") from e
            return None

    async def _get_list(self, path: str) -> List[dict]:
        data = await self._get_json(path)
        if not isinstance(data, list):
            return []
        return [row for row in data if isinstance(row, dict)]

    async def get_rates(self, user: str, strict: bool = False) -> Optional[dict]:
        data = await self._get_json(f"/orders/brokerage-settings/{quote(user, safe='')}", strict=strict)
        return data if isinstance(data, dict) else None

    async def save_rates(self, user: str, rates: dict) -> None:
        path = f"/orders/brokerage-settings/{quote(user, safe='')}"
        try:
            async with self._client() as client:
                resp = await client.post(path, json=rates)
        except httpx.HTTPError as e:
            raise BackendError(f"Saving brokerage settings failed: {e}") from e
        if resp.status_code >= 300:
            raise BackendError(f"Saving brokerage settings failed: HTTP {resp.status_code}")

    async def get_open_orders(self, user: str) -> List[dict]:
        return await self._get_list(f"/orders/{quote(user, safe='')}")

    async def get_positions(self, user: str) -> List[dict]:
        return await self._get_list(f"/orders/positions/{quote(user, safe='')}")

    async def get_history(self, user: str) -> List[dict]:
        return await self._get_list(f"/orders/history/{quote(user, safe='')}")

    async def get_activity(self, user: str) -> List[dict]:
        return await self._get_list(f"/orders/activity/{quote(user, safe='')}")

    async def get_holdings(self, user: str) -> List[dict]:
        data = await self._get_json(f"/portfolio/{quote(user, safe='')}")
        if not isinstance(data, dict) or not isinstance(data.get("open"), list):
            return []
        return [row for row in data["open"] if isinstance(row, dict)]

    async def get_quotes(self, symbols: List[str]) -> Dict[str, float]:
        wanted = sorted({s.strip().upper() for s in symbols if s and s.strip()})
        if not wanted:
            return {}
        data = await self._get_json("/quotes", params={"symbols": ",".join(wanted)})
        quotes: Dict[str, float] = {}
        for q in data if isinstance(data, list) else []:
            if not isinstance(q, dict):
                continue
            sym = str(q.get("symbol") or "").upper()
            price = to_float_or_none(q.get("price"))
            if sym and price is not None:
                quotes[sym] = price
        return quotes
