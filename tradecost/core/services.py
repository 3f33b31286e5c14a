import asyncio
from typing import Dict, List, Optional
import logging

from tradecost.core.entities.rates import RateSchedule
from tradecost.core.entities.valuation import LedgerRow, PortfolioSummary, ValuationsResponse
from tradecost.core.interfaces.datasource import IDataSource
from tradecost.core.interfaces.freeze_store import IFreezeStore
from tradecost.core.use_cases.aggregations import (
    build_activity_ledger,
    summarize_portfolio,
    total_pnl,
    valuate_closed_trade,
)
from tradecost.core.use_cases.normalizer import normalize_holding, normalize_position, normalize_symbol
from tradecost.core.use_cases.pnl_resolver import valuate_leg
from tradecost.core.use_cases.rate_resolver import load_rates, rates_to_payload, resolve_rates

logger = logging.getLogger(__name__)


# --- Business Logic Services ---

class RateService:
    def __init__(self, datasource: IDataSource):
        self.db = datasource

    async def get(self, user: str) -> RateSchedule:
        return await load_rates(self.db, user)

    async def save(self, user: str, overrides: dict) -> RateSchedule:
        # Merge onto what is already saved so a partial edit keeps the other fields
        current = await self.db.get_rates(user, strict=True) or {}
        rates = resolve_rates({**current, **overrides})
        await self.db.save_rates(user, rates_to_payload(rates))
        logger.info(f"Saved brokerage settings for {user} (mode={rates.brokerage_mode.value})")
        return rates

    async def reset(self, user: str) -> RateSchedule:
        rates = resolve_rates()
        await self.db.save_rates(user, rates_to_payload(rates))
        logger.info(f"Reset brokerage settings for {user}")
        return rates


class ValuationService:
    def __init__(self, datasource: IDataSource, freeze_store: Optional[IFreezeStore] = None):
        self.db = datasource
        self.freeze_store = freeze_store
        self.rates = RateService(datasource)

    async def _quotes_for(self, rows: List[dict]) -> Dict[str, float]:
        symbols = [normalize_symbol(r) for r in rows]
        return await self.db.get_quotes([s for s in symbols if s])

    def valuate_rows(
        self,
        user: str,
        rows: List[dict],
        rates: RateSchedule,
        quotes: Optional[Dict[str, float]] = None,
        is_order: bool = False,
    ) -> ValuationsResponse:
        legs = [normalize_position(r, quotes, is_order=is_order) for r in rows]
        valuations = [valuate_leg(leg, rates, self.freeze_store, user) for leg in legs]
        return ValuationsResponse(user=user, total_pnl=total_pnl(valuations), legs=valuations)

    async def positions(self, user: str) -> ValuationsResponse:
        rates, rows = await asyncio.gather(self.rates.get(user), self.db.get_positions(user))
        quotes = await self._quotes_for(rows)
        return self.valuate_rows(user, rows, rates, quotes)

    async def open_orders(self, user: str) -> ValuationsResponse:
        rates, rows = await asyncio.gather(self.rates.get(user), self.db.get_open_orders(user))
        quotes = await self._quotes_for(rows)
        return self.valuate_rows(user, rows, rates, quotes, is_order=True)

    async def history(self, user: str) -> ValuationsResponse:
        rates, rows = await asyncio.gather(self.rates.get(user), self.db.get_history(user))
        valuations = [valuate_closed_trade(r, rates, self.freeze_store, user) for r in rows]
        return ValuationsResponse(user=user, total_pnl=total_pnl(valuations), legs=valuations)

    async def portfolio_summary(self, user: str) -> PortfolioSummary:
        rates, rows = await asyncio.gather(self.rates.get(user), self.db.get_holdings(user))
        quotes = await self._quotes_for(rows)
        legs = [normalize_holding(r, quotes) for r in rows]
        return summarize_portfolio(legs, rates, user=user)

    async def ledger(self, user: str) -> List[LedgerRow]:
        rates, rows = await asyncio.gather(self.rates.get(user), self.db.get_activity(user))
        return build_activity_ledger(rows, rates)
