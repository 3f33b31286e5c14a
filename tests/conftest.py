"""
Pytest configuration and shared fixtures.
"""
import pytest
from httpx import AsyncClient, ASGITransport

from tradecost.api.main import app, get_datasource, get_freeze_store
from tradecost.core.entities.rates import RateSchedule
from tradecost.infrastructure.cache.memory_store import InMemoryFreezeStore
from tradecost.infrastructure.gateways.local_mock import LocalMockDataSource

TEST_USER = "trader1"


@pytest.fixture
def default_rates() -> RateSchedule:
    return RateSchedule()


@pytest.fixture
def pct_rates() -> RateSchedule:
    return RateSchedule(
        brokerage_mode="PCT",
        brokerage_intraday_pct=0.0005,
        brokerage_delivery_pct=0.005,
        tax_intraday_pct=0.00018,
        tax_delivery_pct=0.0011,
    )


@pytest.fixture
def freeze_store() -> InMemoryFreezeStore:
    return InMemoryFreezeStore()


@pytest.fixture
def datasource() -> LocalMockDataSource:
    return LocalMockDataSource(
        positions={TEST_USER: [
            {"script": "INFY", "type": "BUY", "segment": "delivery", "qty": 10,
             "price": 100, "datetime": "2025-01-02 09:30:00"},
            {"script": "SBIN", "type": "SELL", "segment": "intraday", "qty": 5,
             "price": 200, "exit_price": 180, "inactive": True,
             "datetime": "2025-01-02 09:45:00"},
        ]},
        orders={TEST_USER: [
            {"script": "TCS", "order_type": "BUY", "segment": "intraday", "qty": 2,
             "price": 3000, "trigger_price": 2950, "datetime": "2025-01-02 10:00:00"},
        ]},
        history={TEST_USER: [
            {"symbol": "TCS", "buy_qty": 10, "buy_price": 100, "sell_avg_price": 120,
             "segment": "delivery", "buy_date": "2025-01-01 10:00:00"},
        ]},
        activity={TEST_USER: [
            {"script": "INFY", "activity_type": "ADD", "qty": 10, "price": 100,
             "segment": "delivery", "datetime": "2025-01-02 09:30:00"},
            {"script": "SBIN", "activity_type": "SELL_FIRST", "qty": 5, "price": 200,
             "segment": "intraday", "datetime": "2025-01-02 09:45:00"},
        ]},
        holdings={TEST_USER: [
            {"symbol": "TCS", "qty": 10, "avg_price": 100, "current_price": 110},
        ]},
        quotes={"INFY": 110.0},
    )


@pytest.fixture
async def client(datasource, freeze_store):
    """Async HTTP client for testing FastAPI endpoints."""
    app.dependency_overrides[get_datasource] = lambda: datasource
    app.dependency_overrides[get_freeze_store] = lambda: freeze_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
