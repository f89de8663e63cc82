import datetime
from abc import ABC, abstractmethod

from wheelbench.core.entities.benchmark import PriceQuote


class IPriceSource(ABC):
    @abstractmethod
    async def get_price(self, ticker: str, on: datetime.date) -> PriceQuote:
        """
        Closing price for ticker on the given date, or on the nearest earlier
        trading day. Raises PriceUnavailableError instead of returning zero.
        """
        pass

    @abstractmethod
    async def get_latest_price(self, ticker: str) -> PriceQuote:
        pass
