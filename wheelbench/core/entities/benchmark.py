import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PriceQuote(BaseModel):
    """
    A closing price for a ticker. date is the trading day the close belongs
    to, which can be earlier than the day asked for (weekends, holidays).
    """
    ticker: str
    date: datetime.date
    price: Decimal = Field(gt=0)


class BenchmarkMetrics(BaseModel):
    """
    The benchmark position implied by the deposit ledger, valued now.
    """
    ticker: str
    initial_capital: Decimal
    setup_date: Optional[datetime.date] = None
    initial_price: Optional[Decimal] = None
    shares: Decimal
    current_price: Decimal
    current_value: Decimal
    gain_loss: Decimal
    return_percent: float
    price_date: Optional[datetime.date] = None
