from decimal import Decimal
from typing import List

from wheelbench.core.entities.deposit import DepositRecord, DepositSummary, DepositType
from wheelbench.core.use_cases.benchmark_accumulator import BenchmarkAccumulator


def summarize(records: List[DepositRecord]) -> DepositSummary:
    """Aggregate a user's ledger. An empty ledger gives a zeroed summary."""
    deposits = [r for r in records if r.type == DepositType.DEPOSIT]
    withdrawals = [r for r in records if r.type == DepositType.WITHDRAWAL]

    # Same running totals the DCA replay uses, so the two can never disagree.
    series = BenchmarkAccumulator.accumulate(records)
    net_invested = series.total_invested
    total_shares = series.total_shares
    avg_cost_basis = net_invested / total_shares if total_shares != 0 else None

    return DepositSummary(
        total_deposits=sum((r.amount for r in deposits), Decimal("0")),
        total_withdrawals=sum((abs(r.amount) for r in withdrawals), Decimal("0")),
        deposit_count=len(deposits),
        withdrawal_count=len(withdrawals),
        net_invested=net_invested,
        total_benchmark_shares=total_shares,
        avg_cost_basis=avg_cost_basis,
        first_deposit_date=series.points[0].date if series.points else None,
        last_deposit_date=series.points[-1].date if series.points else None,
    )
