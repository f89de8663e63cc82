import datetime
from typing import Dict, Optional

from wheelbench.core.entities.benchmark import PriceQuote
from wheelbench.core.errors import PriceUnavailableError
from wheelbench.core.interfaces.price_source import IPriceSource
from wheelbench.core.money import Number, is_valid_price, to_decimal


class StaticPriceSource(IPriceSource):
    """
    Serves prices from a fixed table. Used for tests and offline runs.

    closes maps ticker -> {date: price}. A lookup for a date without an
    entry falls back to the nearest earlier date, like a market holiday.
    """

    def __init__(
        self,
        closes: Optional[Dict[str, Dict[datetime.date, Number]]] = None,
        latest: Optional[Dict[str, PriceQuote]] = None,
    ):
        self.closes = {
            ticker.upper(): {d: to_decimal(p) for d, p in prices.items()}
            for ticker, prices in (closes or {}).items()
        }
        self.latest = {t.upper(): q for t, q in (latest or {}).items()}
        self.calls = 0

    @staticmethod
    def _quote(ticker: str, day: datetime.date, prices: Dict[datetime.date, Number]) -> PriceQuote:
        if not is_valid_price(prices[day]):
            raise PriceUnavailableError(f"Bad price for {ticker} on {day}: {prices[day]}")
        return PriceQuote(ticker=ticker.upper(), date=day, price=prices[day])

    async def get_price(self, ticker: str, on: datetime.date) -> PriceQuote:
        self.calls += 1
        prices = self.closes.get(ticker.upper(), {})
        earlier = [d for d in prices if d <= on]
        if not earlier:
            raise PriceUnavailableError(f"No price for {ticker} on or before {on}")
        return self._quote(ticker, max(earlier), prices)

    async def get_latest_price(self, ticker: str) -> PriceQuote:
        self.calls += 1
        quote = self.latest.get(ticker.upper())
        if quote is not None:
            return quote
        prices = self.closes.get(ticker.upper())
        if not prices:
            raise PriceUnavailableError(f"No price for {ticker}")
        return self._quote(ticker, max(prices), prices)
