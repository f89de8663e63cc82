import asyncio
import datetime
import logging

import yfinance as yf

from wheelbench.core.entities.benchmark import PriceQuote
from wheelbench.core.errors import PriceUnavailableError
from wheelbench.core.interfaces.price_source import IPriceSource
from wheelbench.core.money import is_valid_price, to_decimal

logger = logging.getLogger(__name__)

# How far back to look for the previous close when the requested date is a
# weekend or market holiday.
LOOKBACK_DAYS = 10


class YFinancePriceGateway(IPriceSource):
    """
    Implementation of IPriceSource backed by Yahoo Finance daily history.
    yfinance is synchronous, so calls are run in a worker thread to stay async.
    """

    def _history(self, ticker: str, **kwargs):
        return yf.Ticker(ticker).history(auto_adjust=False, **kwargs)

    def _to_quote(self, ticker: str, history, on: datetime.date = None) -> PriceQuote:
        if history is None or history.empty:
            raise PriceUnavailableError(f"No price history for {ticker}")

        closes = history["Close"].dropna()
        if on is not None:
            closes = closes[[ts.date() <= on for ts in closes.index]]
        if closes.empty:
            raise PriceUnavailableError(f"No close for {ticker} on or before {on}")

        price = to_decimal(round(float(closes.iloc[-1]), 4))
        if not is_valid_price(price):
            raise PriceUnavailableError(f"Non-positive close for {ticker}: {price}")
        return PriceQuote(ticker=ticker, date=closes.index[-1].date(), price=price)

    async def get_price(self, ticker: str, on: datetime.date) -> PriceQuote:
        """
        Fetches the close on `on`, or the last close before it within the
        look-back window.
        """
        start = on - datetime.timedelta(days=LOOKBACK_DAYS)
        end = on + datetime.timedelta(days=1)  # yfinance end is exclusive
        try:
            history = await asyncio.to_thread(
                self._history, ticker, start=start.isoformat(), end=end.isoformat()
            )
        except Exception as e:
            logger.error(f"Failed to fetch {ticker} history for {on}: {e}")
            raise PriceUnavailableError(f"Failed to fetch {ticker} price for {on}") from e
        return self._to_quote(ticker, history, on)

    async def get_latest_price(self, ticker: str) -> PriceQuote:
        try:
            history = await asyncio.to_thread(self._history, ticker, period="5d")
        except Exception as e:
            logger.error(f"Failed to fetch latest {ticker} price: {e}")
            raise PriceUnavailableError(f"Failed to fetch latest {ticker} price") from e
        return self._to_quote(ticker, history)
