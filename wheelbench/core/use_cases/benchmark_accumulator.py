from decimal import Decimal
from typing import List

from wheelbench.core.entities.comparison import DCAPoint, DCASeries
from wheelbench.core.entities.deposit import DepositRecord


def sort_chronologically(records: List[DepositRecord]) -> List[DepositRecord]:
    # sorted() is stable, so same-day entries keep their ledger order.
    return sorted(records, key=lambda r: r.date)


class BenchmarkAccumulator:
    @staticmethod
    def accumulate(records: List[DepositRecord]) -> DCASeries:
        """
        Replays the ledger as if every deposit bought (and every withdrawal
        sold) benchmark shares on its date, at the price recorded with it.

        Over-withdrawals are not rejected here: a negative running share
        count is a valid net-short benchmark position.
        """
        invested_so_far = Decimal("0")
        shares_so_far = Decimal("0")
        points: List[DCAPoint] = []

        for record in sort_chronologically(records):
            invested_so_far += record.amount
            shares_so_far += record.benchmark_shares
            points.append(DCAPoint(
                date=record.date,
                amount=record.amount,
                benchmark_price=record.benchmark_price,
                invested_so_far=invested_so_far,
                shares_so_far=shares_so_far,
            ))

        return DCASeries(
            points=points,
            total_invested=invested_so_far,
            total_shares=shares_so_far,
        )
