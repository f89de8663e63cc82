import datetime
from decimal import Decimal
from typing import List, Optional

from wheelbench.core.entities.comparison import LumpSumScenario
from wheelbench.core.entities.deposit import DepositRecord
from wheelbench.core.errors import InvalidPriceError, NoDepositsError
from wheelbench.core.money import Number, is_valid_price, to_decimal
from wheelbench.core.use_cases.benchmark_accumulator import sort_chronologically


def require_price(value: Optional[Number], label: str) -> Decimal:
    price = to_decimal(value)
    if not is_valid_price(price):
        raise InvalidPriceError(f"{label} must be a positive number, got {value!r}")
    return price


class LumpSumSimulator:
    @staticmethod
    def simulate(
        total_invested: Decimal,
        lump_sum_date: datetime.date,
        lump_sum_price: Optional[Number],
    ) -> LumpSumScenario:
        """
        Deploys total_invested in a single benchmark purchase.

        total_invested should be the DCA path's net invested amount so both
        paths are compared on equal capital. The price is used verbatim.
        """
        price = require_price(lump_sum_price, "Lump sum price")
        return LumpSumScenario(
            date=lump_sum_date,
            price=price,
            invested=total_invested,
            shares=total_invested / price,
        )

    @staticmethod
    def default_scenario(records: List[DepositRecord], total_invested: Decimal) -> LumpSumScenario:
        """Everything invested on the first deposit's date at its recorded price."""
        if not records:
            raise NoDepositsError()
        first = sort_chronologically(records)[0]
        return LumpSumSimulator.simulate(total_invested, first.date, first.benchmark_price)
