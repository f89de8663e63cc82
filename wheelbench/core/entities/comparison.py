"""
Dollar-cost-average vs lump-sum comparison entities.
"""
import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel


class Winner(str, Enum):
    DCA = "DCA"
    LUMP_SUM = "LUMP_SUM"
    TIE = "TIE"


class LumpSumMode(str, Enum):
    DEFAULT = "DEFAULT"  # first deposit date at its recorded price
    WHAT_IF = "WHAT_IF"  # caller-supplied hypothetical date and price


class DCAPoint(BaseModel):
    """Running benchmark position right after one ledger entry."""
    date: datetime.date
    amount: Decimal
    benchmark_price: Decimal
    invested_so_far: Decimal
    shares_so_far: Decimal

    def value_at(self, price: Decimal) -> Decimal:
        return self.shares_so_far * price


class DCASeries(BaseModel):
    points: list[DCAPoint]
    total_invested: Decimal
    total_shares: Decimal

    @property
    def is_net_short(self) -> bool:
        # Withdrawals can exceed what was bought; callers may flag this.
        return any(p.shares_so_far < 0 for p in self.points)


class LumpSumScenario(BaseModel):
    date: datetime.date
    price: Decimal
    invested: Decimal
    shares: Decimal


class ComparisonDataPoint(BaseModel):
    date: datetime.date
    dca_value: Decimal
    lump_sum_value: Decimal
    dca_shares: Decimal
    dca_invested: Decimal


class LumpSumComparison(BaseModel):
    """
    Result of comparing the actual deposit history (DCA) against the same
    capital invested all at once on lump_sum_date.

    Currency fields are Decimal; *_pct fields are plain percentages
    (20.0 means +20%).
    """
    # Current totals
    dca_shares: Decimal
    dca_invested: Decimal
    lump_sum_shares: Decimal
    lump_sum_invested: Decimal

    # Values at the current benchmark price
    current_benchmark_price: Decimal
    dca_current_value: Decimal
    lump_sum_current_value: Decimal

    # Returns
    dca_return: Decimal
    lump_sum_return: Decimal
    dca_return_pct: float
    lump_sum_return_pct: float

    # Comparison; timing_benefit > 0 means DCA helped
    difference: Decimal
    difference_pct: float
    timing_benefit: Decimal
    timing_benefit_pct: float
    winner: Winner

    data_points: list[ComparisonDataPoint]

    mode: LumpSumMode
    lump_sum_date: datetime.date
    lump_sum_price: Decimal
    first_deposit_date: datetime.date
    last_deposit_date: datetime.date
