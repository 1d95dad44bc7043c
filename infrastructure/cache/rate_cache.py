import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from redis import asyncio as redis
from redis.exceptions import RedisError

from domain.exceptions.currency import CacheError, RateValidationError
from domain.models.currency import DEFAULT_FOREIGN_CURRENCIES, CacheEntry, normalize_rates

logger = logging.getLogger(__name__)

RATES_KEY = "exchange_rates"
TIMESTAMP_KEY = "exchange_rates_timestamp"
STORAGE_SOURCE = "storage"


class RateCache:
    """
    Holds the current exchange rate entry in memory and mirrors it to Redis.

    Memory is authoritative for the running process. Redis only lets a
    restarted process pick up where the last one left off, so every storage
    failure here degrades to a cache miss instead of raising.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        currencies: Iterable[str] = DEFAULT_FOREIGN_CURRENCIES,
    ):
        self.redis = redis_client
        self.currencies = tuple(currencies)
        self._entry: CacheEntry | None = None

    @property
    def entry(self) -> CacheEntry | None:
        return self._entry

    async def load(self) -> CacheEntry | None:
        if self._entry is not None:
            return self._entry

        try:
            raw_rates = await self.redis.get(RATES_KEY)
            raw_timestamp = await self.redis.get(TIMESTAMP_KEY)
        except (RedisError, OSError) as e:
            logger.warning(f"Could not read persisted exchange rates: {e}")
            return None

        if not raw_rates or not raw_timestamp:
            return None

        try:
            entry = self._deserialize(raw_rates, raw_timestamp)
        except CacheError as e:
            logger.warning(f"Ignoring persisted exchange rates: {e}")
            return None

        # A save that landed while the reads were pending is newer than storage.
        if self._entry is not None:
            return self._entry

        self._entry = entry
        logger.info(f"Loaded exchange rates fetched at {entry.fetched_at.isoformat()}")
        return entry

    async def save(self, entry: CacheEntry) -> None:
        self._entry = entry

        rates_json = json.dumps({code: str(rate) for code, rate in entry.rates.items()})
        try:
            await self.redis.set(RATES_KEY, rates_json)
            await self.redis.set(TIMESTAMP_KEY, str(entry.fetched_at_ms))
        except (RedisError, OSError) as e:
            logger.warning(f"Could not persist exchange rates: {e}")

    async def clear(self) -> None:
        self._entry = None
        try:
            await self.redis.delete(RATES_KEY, TIMESTAMP_KEY)
        except (RedisError, OSError) as e:
            logger.warning(f"Could not clear persisted exchange rates: {e}")

    def is_fresh(self, now: datetime, window: timedelta) -> bool:
        if self._entry is None:
            return False
        return now - self._entry.fetched_at < window

    def _deserialize(self, raw_rates: str | bytes, raw_timestamp: str | bytes) -> CacheEntry:
        try:
            data = json.loads(raw_rates)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CacheError(f"Invalid json data: {e}") from e

        if not isinstance(data, dict):
            raise CacheError("Invalid json data: expected an object of rates")

        try:
            rates = normalize_rates(data, self.currencies)
        except RateValidationError as e:
            raise CacheError(str(e)) from e

        try:
            fetched_at = datetime.fromtimestamp(int(raw_timestamp) / 1000, tz=UTC)
        except (ValueError, OverflowError, OSError) as e:
            raise CacheError(f"Invalid timestamp: {raw_timestamp!r}") from e

        return CacheEntry(rates=rates, fetched_at=fetched_at, source=STORAGE_SOURCE)
