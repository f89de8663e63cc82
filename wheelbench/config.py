import os

# Postgres DSN for the deposit ledger. In-memory ledger when unset.
DATABASE_URL = os.getenv("DATABASE_URL")

# Redis URL for the price cache. Caching disabled when unset.
REDIS_URL = os.getenv("REDIS_URL")

BENCHMARK_TICKER = os.getenv("BENCHMARK_TICKER", "SPY").upper()

# Historical closes never change, so they can live in the cache for a day.
PRICE_CACHE_TTL_SECONDS = int(os.getenv("PRICE_CACHE_TTL_SECONDS", "86400"))
LATEST_PRICE_TTL_SECONDS = int(os.getenv("LATEST_PRICE_TTL_SECONDS", "60"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
