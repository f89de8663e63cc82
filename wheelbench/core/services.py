import asyncio
import datetime
import logging
from decimal import Decimal
from typing import List, Optional

from wheelbench import config
from wheelbench.core.entities.benchmark import BenchmarkMetrics
from wheelbench.core.entities.comparison import LumpSumComparison
from wheelbench.core.entities.deposit import (
    DepositPreview,
    DepositRecord,
    DepositSummary,
    DepositType,
)
from wheelbench.core.errors import (
    DepositNotFoundError,
    InvalidDepositError,
    WithdrawalExceedsCapitalError,
)
from wheelbench.core.interfaces.ledger import IDepositLedger
from wheelbench.core.interfaces.price_source import IPriceSource
from wheelbench.core.money import Number, to_decimal
from wheelbench.core.use_cases.benchmark_metrics import (
    calculate_benchmark_metrics,
    calculate_benchmark_shares,
)
from wheelbench.core.use_cases.comparison_engine import ComparisonEngine
from wheelbench.core.use_cases.deposit_summary import summarize

logger = logging.getLogger(__name__)


def _validate_movement(amount: Number, on: datetime.date, today: datetime.date) -> Decimal:
    value = to_decimal(amount)
    if value is None or not value.is_finite():
        raise InvalidDepositError("Amount must be finite")
    if value <= 0:
        raise InvalidDepositError("Amount must be greater than 0")
    if on > today:
        raise InvalidDepositError("Date cannot be in the future")
    return value


# --- Business Logic Services ---

class DepositService:
    """
    Records cash movements. Each one is stamped with the benchmark close on
    its date at entry time; stored prices are never recomputed later.
    """

    def __init__(self, ledger: IDepositLedger, prices: IPriceSource, ticker: str = config.BENCHMARK_TICKER):
        self.ledger = ledger
        self.prices = prices
        self.ticker = ticker

    async def preview(self, amount: Number, on: datetime.date) -> DepositPreview:
        value = _validate_movement(amount, on, datetime.date.today())
        quote = await self.prices.get_price(self.ticker, on)
        return DepositPreview(
            ticker=self.ticker,
            amount=value,
            benchmark_price=quote.price,
            benchmark_shares=calculate_benchmark_shares(value, quote.price),
            price_date=quote.date,
        )

    async def record_deposit(
        self, user: str, amount: Number, on: datetime.date, notes: Optional[str] = None
    ) -> DepositRecord:
        value = _validate_movement(amount, on, datetime.date.today())
        return await self._record(user, value, DepositType.DEPOSIT, on, notes)

    async def record_withdrawal(
        self, user: str, amount: Number, on: datetime.date, notes: Optional[str] = None
    ) -> DepositRecord:
        value = _validate_movement(amount, on, datetime.date.today())

        summary = await self.get_summary(user)
        if value > summary.net_invested:
            raise WithdrawalExceedsCapitalError(
                f"Cannot withdraw ${value}. You have only invested ${summary.net_invested} total."
            )
        return await self._record(user, value, DepositType.WITHDRAWAL, on, notes)

    async def _record(
        self, user: str, value: Decimal, deposit_type: DepositType, on: datetime.date, notes: Optional[str]
    ) -> DepositRecord:
        quote = await self.prices.get_price(self.ticker, on)
        record = DepositRecord.create(value, deposit_type, on, quote.price, notes=notes or None)
        stored = await self.ledger.add_deposit(user, record)
        logger.info(
            f"Recorded {deposit_type.value} of {value} for {user} on {on} "
            f"at {self.ticker} {quote.price} ({stored.benchmark_shares:.4f} shares)"
        )
        return stored

    async def get_deposits(
        self,
        user: str,
        start: Optional[datetime.date] = None,
        end: Optional[datetime.date] = None,
        deposit_type: Optional[DepositType] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[DepositRecord]:
        """Newest first; same-day entries newest-recorded first."""
        records = await self.ledger.get_deposits(user, start, end, deposit_type)
        ordered = [r for _, r in sorted(
            enumerate(records), key=lambda pair: (pair[1].date, pair[0]), reverse=True
        )]
        if limit is None:
            return ordered[offset:]
        return ordered[offset:offset + limit]

    async def get_summary(self, user: str) -> DepositSummary:
        return summarize(await self.ledger.get_deposits(user))

    async def delete_deposit(self, user: str, deposit_id: str) -> None:
        if not await self.ledger.delete_deposit(user, deposit_id):
            raise DepositNotFoundError(f"Deposit {deposit_id} not found")
        logger.info(f"Deleted deposit {deposit_id} for {user}")

    async def update_notes(self, user: str, deposit_id: str, notes: Optional[str]) -> DepositRecord:
        record = await self.ledger.update_notes(user, deposit_id, notes)
        if record is None:
            raise DepositNotFoundError(f"Deposit {deposit_id} not found")
        return record


class ComparisonService:
    """
    Resolves prices and the ledger, then hands them to the pure comparison
    engine. All I/O happens here; the engine never fetches anything.
    """

    def __init__(self, ledger: IDepositLedger, prices: IPriceSource, ticker: str = config.BENCHMARK_TICKER):
        self.ledger = ledger
        self.prices = prices
        self.ticker = ticker

    async def _load(self, user: str):
        # Ledger and current price are independent; fetch them in parallel.
        return await asyncio.gather(
            self.ledger.get_deposits(user),
            self.prices.get_latest_price(self.ticker),
        )

    async def compare(
        self,
        user: str,
        lump_sum_date: Optional[datetime.date] = None,
        lump_sum_price: Optional[Number] = None,
    ) -> LumpSumComparison:
        records, current = await self._load(user)
        return ComparisonEngine.compare(
            records,
            current.price,
            lump_sum_date=lump_sum_date,
            lump_sum_price=lump_sum_price,
            as_of=datetime.date.today(),
        )

    async def what_if(
        self,
        user: str,
        lump_sum_date: datetime.date,
        lump_sum_price: Optional[Number] = None,
    ) -> LumpSumComparison:
        """
        Lump sum on an arbitrary date. A caller-supplied price is used as is;
        only a missing one is looked up for that date.
        """
        if lump_sum_price is None:
            quote = await self.prices.get_price(self.ticker, lump_sum_date)
            lump_sum_price = quote.price
        return await self.compare(user, lump_sum_date, lump_sum_price)

    async def benchmark_metrics(self, user: str) -> BenchmarkMetrics:
        records, current = await self._load(user)
        return calculate_benchmark_metrics(records, self.ticker, current.price, current.date)
