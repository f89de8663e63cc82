"""
Tests for the DCA replay and the deposit summary built on it.
"""
from datetime import date
from decimal import Decimal

import pytest

from conftest import make_deposit
from wheelbench.core.entities.deposit import DepositRecord, DepositType
from wheelbench.core.use_cases.benchmark_accumulator import BenchmarkAccumulator
from wheelbench.core.use_cases.deposit_summary import summarize


def test_empty_ledger_accumulates_to_zero():
    series = BenchmarkAccumulator.accumulate([])
    assert series.points == []
    assert series.total_invested == 0
    assert series.total_shares == 0
    assert not series.is_net_short


def test_running_totals_follow_each_record():
    records = [
        make_deposit(5000, date(2024, 1, 1), "450.00"),
        make_deposit(5000, date(2024, 6, 1), "500.00"),
    ]
    series = BenchmarkAccumulator.accumulate(records)

    assert [p.date for p in series.points] == [date(2024, 1, 1), date(2024, 6, 1)]
    assert series.points[0].invested_so_far == Decimal("5000")
    assert round(series.points[0].shares_so_far, 4) == Decimal("11.1111")
    assert series.points[1].invested_so_far == Decimal("10000")
    assert round(series.points[1].shares_so_far, 4) == Decimal("21.1111")
    assert round(series.points[1].value_at(Decimal("550")), 2) == Decimal("11611.11")


def test_unsorted_input_is_replayed_chronologically():
    late = make_deposit(1000, date(2024, 3, 1), "100")
    early = make_deposit(2000, date(2024, 1, 1), "100")
    series = BenchmarkAccumulator.accumulate([late, early])

    assert [p.date for p in series.points] == [date(2024, 1, 1), date(2024, 3, 1)]
    assert series.points[0].invested_so_far == Decimal("2000")


def test_same_day_records_keep_ledger_order():
    first = make_deposit(1000, date(2024, 1, 1), "100")
    second = make_deposit(-300, date(2024, 1, 1), "100")
    series = BenchmarkAccumulator.accumulate([first, second])

    assert [p.amount for p in series.points] == [Decimal("1000"), Decimal("-300")]
    assert series.points[0].invested_so_far == Decimal("1000")


def test_withdrawal_reduces_both_totals():
    records = [
        make_deposit(2000, date(2024, 1, 1), "400"),
        make_deposit(-500, date(2024, 2, 1), "500"),
    ]
    series = BenchmarkAccumulator.accumulate(records)
    assert series.total_invested == Decimal("1500")
    assert series.total_shares == Decimal("4")


def test_over_withdrawal_is_accepted_as_net_short():
    """Deposit 10 shares, withdraw 20: the replay ends at -10 without error."""
    records = [
        make_deposit(1000, date(2024, 1, 1), "100"),
        make_deposit(-2000, date(2024, 2, 1), "100"),
    ]
    series = BenchmarkAccumulator.accumulate(records)

    assert series.total_shares == Decimal("-10")
    assert series.is_net_short

    summary = summarize(records)
    assert summary.total_benchmark_shares == Decimal("-10")
    assert summary.net_invested == Decimal("-1000")


@pytest.mark.parametrize("amounts_and_prices", [
    [(1000, "400"), (1000, "420"), (1000, "450")],
    [(2500, "471.33"), (-400, "480.10"), (1200, "455.05"), (-3000, "510.00")],
    [(10000, "450")],
])
def test_final_shares_match_summary(amounts_and_prices):
    records = [
        make_deposit(amount, date(2024, 1, i + 1), price)
        for i, (amount, price) in enumerate(amounts_and_prices)
    ]
    series = BenchmarkAccumulator.accumulate(records)

    assert series.total_shares == sum(r.benchmark_shares for r in records)
    assert series.total_shares == summarize(records).total_benchmark_shares
    assert series.total_invested == summarize(records).net_invested


def test_summary_counts_and_totals():
    records = [
        make_deposit(1000, date(2024, 1, 1), "400"),
        make_deposit(-250, date(2024, 3, 1), "500"),
        make_deposit(2000, date(2024, 2, 1), "400"),
    ]
    summary = summarize(records)

    assert summary.total_deposits == Decimal("3000")
    assert summary.total_withdrawals == Decimal("250")
    assert summary.deposit_count == 2
    assert summary.withdrawal_count == 1
    assert summary.net_invested == Decimal("2750")
    assert summary.total_benchmark_shares == Decimal("7")
    assert round(summary.avg_cost_basis, 4) == Decimal("392.8571")
    assert summary.first_deposit_date == date(2024, 1, 1)
    assert summary.last_deposit_date == date(2024, 3, 1)


def test_summary_of_empty_ledger():
    summary = summarize([])
    assert summary.deposit_count == 0
    assert summary.net_invested == 0
    assert summary.avg_cost_basis is None
    assert summary.first_deposit_date is None


def test_record_rejects_non_positive_price():
    with pytest.raises(ValueError):
        DepositRecord(
            amount=Decimal("100"),
            type=DepositType.DEPOSIT,
            date=date(2024, 1, 1),
            benchmark_price=Decimal("0"),
            benchmark_shares=Decimal("0"),
        )


def test_record_rejects_sign_that_disagrees_with_type():
    with pytest.raises(ValueError):
        DepositRecord(
            amount=Decimal("-100"),
            type=DepositType.DEPOSIT,
            date=date(2024, 1, 1),
            benchmark_price=Decimal("100"),
            benchmark_shares=Decimal("-1"),
        )


def test_record_rejects_shares_with_opposite_sign():
    with pytest.raises(ValueError):
        DepositRecord(
            amount=Decimal("1000"),
            type=DepositType.DEPOSIT,
            date=date(2024, 1, 1),
            benchmark_price=Decimal("100"),
            benchmark_shares=Decimal("-10"),
        )


def test_record_rejects_shares_that_do_not_match_amount():
    with pytest.raises(ValueError):
        DepositRecord(
            amount=Decimal("1000"),
            type=DepositType.DEPOSIT,
            date=date(2024, 1, 1),
            benchmark_price=Decimal("100"),
            benchmark_shares=Decimal("9.5"),
        )


def test_record_accepts_sub_cent_share_rounding():
    record = DepositRecord(
        amount=Decimal("5000.00"),
        type=DepositType.DEPOSIT,
        date=date(2024, 1, 2),
        benchmark_price=Decimal("472.65"),
        benchmark_shares=Decimal("10.578652"),
    )
    assert record.benchmark_shares == Decimal("10.578652")


def test_create_signs_withdrawals():
    record = DepositRecord.create(500, DepositType.WITHDRAWAL, date(2024, 1, 1), "250")
    assert record.amount == Decimal("-500")
    assert record.benchmark_shares == Decimal("-2")
