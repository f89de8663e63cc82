import asyncio
import datetime
import logging
from typing import Optional

from pydantic import ValidationError

from wheelbench import config
from wheelbench.core.entities.benchmark import PriceQuote
from wheelbench.core.interfaces.price_source import IPriceSource
from wheelbench.infrastructure.cache.redis_service import RedisService

logger = logging.getLogger(__name__)


class CachedPriceSource(IPriceSource):
    """
    Read-through cache in front of another price source. Historical closes
    are cached for PRICE_CACHE_TTL_SECONDS, the latest price only briefly.
    """

    def __init__(
        self,
        source: IPriceSource,
        cache: RedisService,
        history_ttl: int = config.PRICE_CACHE_TTL_SECONDS,
        latest_ttl: int = config.LATEST_PRICE_TTL_SECONDS,
    ):
        self.source = source
        self.cache = cache
        self.history_ttl = history_ttl
        self.latest_ttl = latest_ttl

    async def _cached(self, key: str) -> Optional[PriceQuote]:
        data = await asyncio.to_thread(self.cache.get, key)
        if data is None:
            return None
        try:
            return PriceQuote.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Discarding bad cache entry {key}: {e}")
            await asyncio.to_thread(self.cache.delete, key)
            return None

    async def get_price(self, ticker: str, on: datetime.date) -> PriceQuote:
        key = f"price:{ticker.upper()}:{on.isoformat()}"
        quote = await self._cached(key)
        if quote is None:
            quote = await self.source.get_price(ticker, on)
            await asyncio.to_thread(self.cache.set, key, quote, self.history_ttl)
        return quote

    async def get_latest_price(self, ticker: str) -> PriceQuote:
        key = f"price:{ticker.upper()}:latest"
        quote = await self._cached(key)
        if quote is None:
            quote = await self.source.get_latest_price(ticker)
            await asyncio.to_thread(self.cache.set, key, quote, self.latest_ttl)
        return quote
