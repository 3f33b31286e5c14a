import logging
import threading
from typing import List, Optional
from fastapi import FastAPI, Query, Depends, HTTPException
from fastapi.middleware.cors import CORSMiddleware
import os

# --- Imports ---
from tradecost.core.interfaces.datasource import IDataSource
from tradecost.core.interfaces.freeze_store import IFreezeStore
from tradecost.core.entities.rates import RateSchedule
from tradecost.core.entities.requests import CostRequest, CostResponse, ValuationRequest
from tradecost.core.entities.valuation import LedgerRow, PortfolioSummary, ValuationsResponse
from tradecost.core.services import RateService, ValuationService
from tradecost.core.use_cases.aggregations import total_pnl, valuate_closed_trade
from tradecost.core.use_cases.cost_calculator import compute_additional_cost, parse_segment
from tradecost.core.use_cases.rate_resolver import resolve_rates
from tradecost.infrastructure.cache.memory_store import InMemoryFreezeStore
from tradecost.infrastructure.cache.redis_service import RedisFreezeStore
from tradecost.infrastructure.gateways.backend_api import BackendError, BackendGateway

# Setup Logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("TradeCost")

app = FastAPI(title="TradeCost API", version="1.0.0", description="Brokerage, tax and P&L valuation for paper-trading legs")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Dependency Injection ---

_freeze_store: Optional[IFreezeStore] = None
_freeze_store_lock = threading.Lock()


def get_datasource() -> IDataSource:
    return BackendGateway()


def get_freeze_store() -> IFreezeStore:
    # One store per process; snapshots must outlive the request
    global _freeze_store
    if _freeze_store is not None:
        return _freeze_store
    with _freeze_store_lock:
        if _freeze_store is None:
            if os.getenv("REDIS_URL"):
                store = RedisFreezeStore()
                _freeze_store = store if store.available else InMemoryFreezeStore()
            else:
                _freeze_store = InMemoryFreezeStore()
            logger.info(f"Closed-trade snapshots stored in {type(_freeze_store).__name__}")
    return _freeze_store


def get_valuation_service(
    gateway: IDataSource = Depends(get_datasource),
    freeze_store: IFreezeStore = Depends(get_freeze_store),
) -> ValuationService:
    return ValuationService(gateway, freeze_store)


# --- Endpoints ---

@app.get("/health")
async def health(freeze_store: IFreezeStore = Depends(get_freeze_store)):
    return {"status": "healthy", "freezeStore": type(freeze_store).__name__}


@app.get("/v1/rates", response_model=RateSchedule)
async def get_rates(
    user: str = Query(..., description="Username"),
    gateway: IDataSource = Depends(get_datasource),
):
    return await RateService(gateway).get(user)


@app.put("/v1/rates", response_model=RateSchedule)
async def save_rates(
    overrides: dict,
    user: str = Query(..., description="Username"),
    gateway: IDataSource = Depends(get_datasource),
):
    """
    Saves brokerage settings. Fields left out keep their saved value;
    invalid numbers fall back to the default for that field.
    """
    try:
        return await RateService(gateway).save(user, overrides)
    except BackendError as e:
        logger.error(f"Failed to save rates for {user}: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/v1/rates/reset", response_model=RateSchedule)
async def reset_rates(
    user: str = Query(..., description="Username"),
    gateway: IDataSource = Depends(get_datasource),
):
    try:
        return await RateService(gateway).reset(user)
    except BackendError as e:
        logger.error(f"Failed to reset rates for {user}: {e}")
        raise HTTPException(status_code=502, detail=str(e))


@app.post("/v1/cost", response_model=CostResponse)
async def get_cost(req: CostRequest):
    """Additional cost (brokerage + tax) of a single leg."""
    rates = resolve_rates(req.rates)
    segment = parse_segment(req.segment)
    return CostResponse(
        segment=segment.value,
        investment=req.investment,
        additional_cost=compute_additional_cost(rates, segment, req.investment),
    )


@app.get("/v1/positions", response_model=ValuationsResponse)
async def get_positions(
    user: str = Query(...),
    service: ValuationService = Depends(get_valuation_service),
):
    return await service.positions(user)


@app.get("/v1/orders", response_model=ValuationsResponse)
async def get_open_orders(
    user: str = Query(...),
    service: ValuationService = Depends(get_valuation_service),
):
    return await service.open_orders(user)


@app.get("/v1/history", response_model=ValuationsResponse)
async def get_history(
    user: str = Query(...),
    service: ValuationService = Depends(get_valuation_service),
):
    return await service.history(user)


@app.get("/v1/portfolio/summary", response_model=PortfolioSummary)
async def get_portfolio_summary(
    user: str = Query(...),
    service: ValuationService = Depends(get_valuation_service),
):
    return await service.portfolio_summary(user)


@app.get("/v1/ledger", response_model=List[LedgerRow])
async def get_ledger(
    user: str = Query(...),
    service: ValuationService = Depends(get_valuation_service),
):
    return await service.ledger(user)


@app.post("/v1/valuations", response_model=ValuationsResponse)
async def post_valuations(
    req: ValuationRequest,
    user: str = Query("", description="Username, used for saved rates and snapshot keys"),
    service: ValuationService = Depends(get_valuation_service),
):
    """
    Values rows supplied by the caller.
    Closed rows are frozen under the same keys the read endpoints use.
    """
    rates = resolve_rates(req.rates) if req.rates is not None else await service.rates.get(user)

    if req.kind == "history":
        valuations = [valuate_closed_trade(r, rates, service.freeze_store, user) for r in req.rows]
        return ValuationsResponse(user=user, total_pnl=total_pnl(valuations), legs=valuations)

    quotes = {k.upper(): v for k, v in req.quotes.items()}
    return service.valuate_rows(user, req.rows, rates, quotes, is_order=req.kind == "orders")
