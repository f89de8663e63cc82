"""
Pytest configuration and shared fixtures.
"""
import datetime
from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport

from wheelbench.api.main import app, get_ledger, get_price_source
from wheelbench.core.entities.benchmark import PriceQuote
from wheelbench.core.entities.deposit import DepositRecord, DepositType
from wheelbench.infrastructure.gateways.local_mock import StaticPriceSource
from wheelbench.infrastructure.persistence.memory_repo import InMemoryLedger

TEST_USER = "user-1"


@pytest.fixture
def anyio_backend():
    return "asyncio"


def make_deposit(amount, on, price, deposit_type=None, **extra) -> DepositRecord:
    """Signed amount in, record out; the type follows the sign unless given."""
    amount = Decimal(str(amount))
    if deposit_type is None:
        deposit_type = DepositType.DEPOSIT if amount > 0 else DepositType.WITHDRAWAL
    return DepositRecord.create(abs(amount), deposit_type, on, price, **extra)


@pytest.fixture
def spy_prices() -> StaticPriceSource:
    return StaticPriceSource(
        closes={
            "SPY": {
                datetime.date(2023, 12, 1): "400.00",
                datetime.date(2024, 1, 1): "450.00",
                datetime.date(2024, 1, 5): "460.00",
                datetime.date(2024, 6, 1): "500.00",
            }
        },
        latest={
            "SPY": PriceQuote(ticker="SPY", date=datetime.date(2024, 10, 1), price=Decimal("550.00")),
        },
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
async def client(ledger, spy_prices):
    """Async HTTP client for testing FastAPI endpoints against in-memory collaborators."""
    app.dependency_overrides[get_ledger] = lambda: ledger
    app.dependency_overrides[get_price_source] = lambda: spy_prices
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
