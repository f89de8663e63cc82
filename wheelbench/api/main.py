import datetime
import logging
from decimal import Decimal
from functools import lru_cache
from typing import Optional

import psycopg2
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

# --- Imports ---
from wheelbench import config
from wheelbench.core.entities.benchmark import BenchmarkMetrics
from wheelbench.core.entities.comparison import LumpSumComparison
from wheelbench.core.entities.deposit import (
    DepositCreate,
    DepositPreview,
    DepositRecord,
    DepositsAggregateResponse,
    DepositSummary,
    DepositType,
    NotesUpdate,
)
from wheelbench.core.errors import (
    DepositNotFoundError,
    NoDepositsError,
    PriceUnavailableError,
    WheelBenchError,
)
from wheelbench.core.interfaces.ledger import IDepositLedger
from wheelbench.core.interfaces.price_source import IPriceSource
from wheelbench.core.services import ComparisonService, DepositService
from wheelbench.core.use_cases.deposit_summary import summarize
from wheelbench.infrastructure.cache.cached_price_source import CachedPriceSource
from wheelbench.infrastructure.cache.redis_service import RedisService
from wheelbench.infrastructure.gateways.yfinance_api import YFinancePriceGateway
from wheelbench.infrastructure.persistence.memory_repo import InMemoryLedger
from wheelbench.infrastructure.persistence.postgres_repo import PostgresRepo

# Setup Logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("WheelBench")

app = FastAPI(
    title="WheelBench API",
    version="1.0.0",
    description="Cash deposit ledger and SPY benchmark / DCA vs lump-sum comparison",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Error Mapping ---

@app.exception_handler(WheelBenchError)
async def domain_error_handler(request: Request, exc: WheelBenchError):
    if isinstance(exc, PriceUnavailableError):
        status = 503
    elif isinstance(exc, (NoDepositsError, DepositNotFoundError)):
        status = 404
    else:
        status = 422
    logger.warning(f"{request.method} {request.url.path} -> {status}: {exc}")
    return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})

# --- Dependency Injection ---

@lru_cache
def get_ledger() -> IDepositLedger:
    if not config.DATABASE_URL:
        logger.info("DATABASE_URL not set. Using in-memory deposit ledger.")
        return InMemoryLedger()
    try:
        return PostgresRepo(config.DATABASE_URL)
    except psycopg2.Error as e:
        logger.error(f"Failed to connect to DB: {e}")
        raise HTTPException(status_code=503, detail="Database not configured or unavailable")


@lru_cache
def get_price_source() -> IPriceSource:
    return CachedPriceSource(YFinancePriceGateway(), RedisService())


def get_deposit_service(
    ledger: IDepositLedger = Depends(get_ledger),
    prices: IPriceSource = Depends(get_price_source),
) -> DepositService:
    return DepositService(ledger, prices)


def get_comparison_service(
    ledger: IDepositLedger = Depends(get_ledger),
    prices: IPriceSource = Depends(get_price_source),
) -> ComparisonService:
    return ComparisonService(ledger, prices)

# --- Endpoints ---

@app.get("/health")
async def health():
    return {"status": "healthy", "benchmark": config.BENCHMARK_TICKER}


@app.get("/v1/deposits", response_model=DepositsAggregateResponse)
async def get_deposits(
    user: str = Query(..., description="User id"),
    fromDate: Optional[datetime.date] = Query(None),
    toDate: Optional[datetime.date] = Query(None),
    type: Optional[DepositType] = Query(None, description="DEPOSIT or WITHDRAWAL"),
    limit: Optional[int] = Query(None, gt=0, le=1000),
    offset: int = Query(0, ge=0),
    service: DepositService = Depends(get_deposit_service),
):
    """
    Deposit/withdrawal history, newest first, with a summary over the same
    filtered set.
    """
    filtered = await service.get_deposits(user, fromDate, toDate, type)
    end = offset + limit if limit is not None else None
    return DepositsAggregateResponse(summary=summarize(filtered), deposits=filtered[offset:end])


@app.post("/v1/deposits", response_model=DepositRecord, status_code=201)
async def record_deposit(
    body: DepositCreate,
    user: str = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    return await service.record_deposit(user, body.amount, body.date, body.notes)


@app.post("/v1/withdrawals", response_model=DepositRecord, status_code=201)
async def record_withdrawal(
    body: DepositCreate,
    user: str = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    return await service.record_withdrawal(user, body.amount, body.date, body.notes)


@app.get("/v1/deposits/summary", response_model=DepositSummary)
async def get_deposit_summary(
    user: str = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    return await service.get_summary(user)


@app.get("/v1/deposits/preview", response_model=DepositPreview)
async def preview_deposit(
    amount: Decimal = Query(..., gt=0),
    date: datetime.date = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    """Benchmark price and shares a deposit would record, without saving it."""
    return await service.preview(amount, date)


@app.patch("/v1/deposits/{deposit_id}", response_model=DepositRecord)
async def update_deposit_notes(
    deposit_id: str,
    body: NotesUpdate,
    user: str = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    return await service.update_notes(user, deposit_id, body.notes)


@app.delete("/v1/deposits/{deposit_id}", status_code=204)
async def delete_deposit(
    deposit_id: str,
    user: str = Query(...),
    service: DepositService = Depends(get_deposit_service),
):
    await service.delete_deposit(user, deposit_id)
    return Response(status_code=204)


@app.get("/v1/benchmark", response_model=BenchmarkMetrics)
async def get_benchmark(
    user: str = Query(...),
    service: ComparisonService = Depends(get_comparison_service),
):
    return await service.benchmark_metrics(user)


@app.get("/v1/benchmark/comparison", response_model=LumpSumComparison)
async def get_lump_sum_comparison(
    user: str = Query(...),
    lumpSumDate: Optional[datetime.date] = Query(None, description="What-if lump sum date"),
    lumpSumPrice: Optional[Decimal] = Query(None, description="What-if price; looked up for lumpSumDate when omitted"),
    service: ComparisonService = Depends(get_comparison_service),
):
    """
    DCA (actual deposits) vs the same capital invested at once.

    Without parameters the lump sum goes in on the first deposit date at its
    recorded price. A lumpSumPrice without a lumpSumDate is rejected.
    """
    if lumpSumDate is not None and lumpSumPrice is None:
        return await service.what_if(user, lumpSumDate)
    return await service.compare(user, lumpSumDate, lumpSumPrice)
