"""
Deposit Entity for WheelBench

One cash movement into or out of the account, stamped with the benchmark
price on its date so the benchmark comparison never depends on re-fetching
history.
"""
import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from wheelbench.core.errors import InvalidPriceError
from wheelbench.core.money import CENT, Number, is_valid_price, to_decimal


class DepositType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"


class DepositRecord(BaseModel):
    """
    Represents a single deposit/withdrawal event.

    amount and benchmark_shares are signed: positive for deposits, negative
    for withdrawals. benchmark_shares is stored, not derived on read, because
    the price captured at entry must survive later changes to price data.
    """
    id: str = Field(default_factory=lambda: uuid4().hex)
    amount: Decimal
    type: DepositType
    date: datetime.date
    benchmark_price: Decimal = Field(gt=0)
    benchmark_shares: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime.datetime] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "c0ffee",
                "amount": "5000.00",
                "type": "DEPOSIT",
                "date": "2024-01-02",
                "benchmark_price": "472.65",
                "benchmark_shares": "10.578652",
                "notes": "January contribution",
            }
        }
    }

    @model_validator(mode="after")
    def _check_signs_and_shares(self) -> "DepositRecord":
        if self.amount == 0:
            raise ValueError("amount must be non-zero")
        if self.type == DepositType.DEPOSIT and self.amount < 0:
            raise ValueError("a DEPOSIT must carry a positive amount")
        if self.type == DepositType.WITHDRAWAL and self.amount > 0:
            raise ValueError("a WITHDRAWAL must carry a negative amount")
        if (self.benchmark_shares < 0) != (self.amount < 0) or self.benchmark_shares == 0:
            raise ValueError("benchmark_shares must carry the same sign as amount")
        # Shares are amount / price at entry; allow only sub-cent rounding drift
        if abs(self.benchmark_shares * self.benchmark_price - self.amount) >= CENT:
            raise ValueError(
                f"benchmark_shares {self.benchmark_shares} at {self.benchmark_price} "
                f"does not match amount {self.amount}"
            )
        return self

    @classmethod
    def create(
        cls,
        amount: Number,
        deposit_type: DepositType,
        on: datetime.date,
        benchmark_price: Number,
        notes: Optional[str] = None,
        **extra,
    ) -> "DepositRecord":
        """
        Build a record from an unsigned magnitude. The sign is taken from
        deposit_type and benchmark_shares is computed at the given price.
        """
        price = to_decimal(benchmark_price)
        if not is_valid_price(price):
            raise InvalidPriceError(f"Benchmark price must be positive, got {benchmark_price!r}")
        magnitude = abs(to_decimal(amount))
        signed = magnitude if deposit_type == DepositType.DEPOSIT else -magnitude
        return cls(
            amount=signed,
            type=deposit_type,
            date=on,
            benchmark_price=price,
            benchmark_shares=signed / price,
            notes=notes,
            **extra,
        )


class DepositSummary(BaseModel):
    """
    Aggregated deposit data for a user.
    """
    total_deposits: Decimal
    total_withdrawals: Decimal
    deposit_count: int
    withdrawal_count: int
    net_invested: Decimal
    total_benchmark_shares: Decimal
    avg_cost_basis: Optional[Decimal] = None
    first_deposit_date: Optional[datetime.date] = None
    last_deposit_date: Optional[datetime.date] = None


class DepositsAggregateResponse(BaseModel):
    summary: DepositSummary
    deposits: list[DepositRecord]


class DepositCreate(BaseModel):
    """Request body for recording a deposit or a withdrawal."""
    amount: Decimal = Field(gt=0)
    date: datetime.date
    notes: Optional[str] = None


class NotesUpdate(BaseModel):
    notes: Optional[str] = None


class DepositPreview(BaseModel):
    """Benchmark price and shares a deposit would record, without saving it."""
    ticker: str
    amount: Decimal
    benchmark_price: Decimal
    benchmark_shares: Decimal
    price_date: datetime.date
