import datetime
from decimal import Decimal
from typing import List, Optional

from wheelbench.core.entities.comparison import (
    ComparisonDataPoint,
    DCASeries,
    LumpSumComparison,
    LumpSumMode,
    LumpSumScenario,
    Winner,
)
from wheelbench.core.entities.deposit import DepositRecord
from wheelbench.core.errors import InvalidPriceError, NoDepositsError
from wheelbench.core.money import CENT, ZERO, Number, percent
from wheelbench.core.use_cases.benchmark_accumulator import BenchmarkAccumulator
from wheelbench.core.use_cases.lump_sum_simulator import LumpSumSimulator, require_price


def pick_winner(dca_value: Decimal, lump_sum_value: Decimal) -> Winner:
    # Values within a cent of each other are a tie; exact equality would
    # turn rounding noise into a winner.
    difference = dca_value - lump_sum_value
    if abs(difference) < CENT:
        return Winner.TIE
    return Winner.DCA if difference > 0 else Winner.LUMP_SUM


def build_data_points(
    series: DCASeries,
    scenario: LumpSumScenario,
    current_price: Decimal,
    as_of: datetime.date,
) -> List[ComparisonDataPoint]:
    """
    Chart series: an opening point when the lump sum predates the first
    deposit, one point per deposit valued at that deposit's recorded price,
    and a closing point valued at the current price.
    """
    points: List[ComparisonDataPoint] = []

    if scenario.date < series.points[0].date:
        points.append(ComparisonDataPoint(
            date=scenario.date,
            dca_value=ZERO,
            lump_sum_value=scenario.invested,
            dca_shares=ZERO,
            dca_invested=ZERO,
        ))

    for p in series.points:
        points.append(ComparisonDataPoint(
            date=p.date,
            dca_value=p.value_at(p.benchmark_price),
            lump_sum_value=scenario.shares * p.benchmark_price,
            dca_shares=p.shares_so_far,
            dca_invested=p.invested_so_far,
        ))

    points.append(ComparisonDataPoint(
        date=as_of,
        dca_value=series.total_shares * current_price,
        lump_sum_value=scenario.shares * current_price,
        dca_shares=series.total_shares,
        dca_invested=series.total_invested,
    ))
    return points


class ComparisonEngine:
    @staticmethod
    def compare(
        records: List[DepositRecord],
        current_benchmark_price: Optional[Number],
        lump_sum_date: Optional[datetime.date] = None,
        lump_sum_price: Optional[Number] = None,
        as_of: Optional[datetime.date] = None,
    ) -> LumpSumComparison:
        """
        Compares the actual deposit history (DCA) against the same net
        capital invested in one purchase.

        With no lump_sum_date/lump_sum_price the purchase happens on the
        first deposit date at that deposit's recorded price. Otherwise both
        are required and used verbatim (what-if mode).

        as_of dates the closing chart point; it defaults to the last deposit
        date so the engine never reads the clock.

        Raises NoDepositsError for an empty ledger and InvalidPriceError for
        a missing or non-positive price. Nothing is computed until every
        input has been validated.
        """
        if not records:
            raise NoDepositsError()
        current_price = require_price(current_benchmark_price, "Current benchmark price")

        what_if = lump_sum_date is not None or lump_sum_price is not None
        if what_if:
            what_if_price = require_price(lump_sum_price, "Lump sum price")
            if lump_sum_date is None:
                raise InvalidPriceError("A lump sum price needs a lump sum date")

        series = BenchmarkAccumulator.accumulate(records)

        # DCA path
        dca_invested = series.total_invested
        dca_shares = series.total_shares
        dca_current_value = dca_shares * current_price
        dca_return = dca_current_value - dca_invested

        # Lump-sum path, same total capital
        if what_if:
            scenario = LumpSumSimulator.simulate(dca_invested, lump_sum_date, what_if_price)
        else:
            scenario = LumpSumSimulator.default_scenario(records, dca_invested)
        lump_sum_current_value = scenario.shares * current_price
        lump_sum_return = lump_sum_current_value - scenario.invested

        difference = dca_current_value - lump_sum_current_value
        difference_pct = percent(difference, lump_sum_current_value)

        first_date = series.points[0].date
        last_date = series.points[-1].date

        return LumpSumComparison(
            dca_shares=dca_shares,
            dca_invested=dca_invested,
            lump_sum_shares=scenario.shares,
            lump_sum_invested=scenario.invested,
            current_benchmark_price=current_price,
            dca_current_value=dca_current_value,
            lump_sum_current_value=lump_sum_current_value,
            dca_return=dca_return,
            lump_sum_return=lump_sum_return,
            dca_return_pct=percent(dca_return, dca_invested),
            lump_sum_return_pct=percent(lump_sum_return, scenario.invested),
            difference=difference,
            difference_pct=difference_pct,
            timing_benefit=difference,
            timing_benefit_pct=difference_pct,
            winner=pick_winner(dca_current_value, lump_sum_current_value),
            data_points=build_data_points(series, scenario, current_price, as_of or last_date),
            mode=LumpSumMode.WHAT_IF if what_if else LumpSumMode.DEFAULT,
            lump_sum_date=scenario.date,
            lump_sum_price=scenario.price,
            first_deposit_date=first_date,
            last_deposit_date=last_date,
        )
