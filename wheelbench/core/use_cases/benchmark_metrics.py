import datetime
from decimal import Decimal
from typing import List, Optional

from wheelbench.core.entities.benchmark import BenchmarkMetrics
from wheelbench.core.entities.deposit import DepositRecord
from wheelbench.core.money import Number, percent, to_decimal
from wheelbench.core.use_cases.benchmark_accumulator import BenchmarkAccumulator
from wheelbench.core.use_cases.lump_sum_simulator import require_price


def calculate_benchmark_shares(capital: Number, price: Number) -> Decimal:
    return to_decimal(capital) / require_price(price, "Benchmark price")


def calculate_benchmark_metrics(
    records: List[DepositRecord],
    ticker: str,
    current_price: Number,
    price_date: Optional[datetime.date] = None,
) -> BenchmarkMetrics:
    """
    Values the benchmark position the ledger has built up. Setup date and
    initial price come from the first deposit; return is 0% while net
    invested capital is zero or negative.
    """
    price = require_price(current_price, "Current benchmark price")
    series = BenchmarkAccumulator.accumulate(records)
    first = series.points[0] if series.points else None

    initial_capital = series.total_invested
    current_value = series.total_shares * price
    gain_loss = current_value - initial_capital

    return BenchmarkMetrics(
        ticker=ticker,
        initial_capital=initial_capital,
        setup_date=first.date if first else None,
        initial_price=first.benchmark_price if first else None,
        shares=series.total_shares,
        current_price=price,
        current_value=current_value,
        gain_loss=gain_loss,
        return_percent=percent(gain_loss, initial_capital) if initial_capital > 0 else 0.0,
        price_date=price_date,
    )
