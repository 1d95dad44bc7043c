import asyncio
import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from domain.models.currency import (
    FALLBACK_RATES,
    CacheEntry,
    ExchangeRateMap,
    RelayResponse,
    normalize_rates,
)
from infrastructure.cache.rate_cache import RateCache

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"
OUTDATED_WARNING = "Exchange rates may be outdated"


class RateSource(Protocol):
    async def fetch_rates(self) -> RelayResponse: ...


class RateHistory(Protocol):
    async def record(self, entry: CacheEntry) -> None: ...


def utc_now() -> datetime:
    return datetime.now(UTC)


class ExchangeRateService:
    """
    Single authority for the current RSD exchange rates.

    Resolution order: fresh cache, then the rate source, then whatever is
    cached (however old), then the fallback constants. ``get_exchange_rates``
    never raises; every path ends in a valid map with RSD at exactly 1.

    Construct one instance per process and inject it wherever rates are needed.
    """

    def __init__(
        self,
        cache: RateCache,
        source: RateSource,
        freshness_window: timedelta = timedelta(hours=24),
        fallback_window: timedelta | None = None,
        always_refetch: bool = False,
        fallback_rates: Mapping[str, Decimal] = FALLBACK_RATES,
        history: RateHistory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.cache = cache
        self.source = source
        self.freshness_window = freshness_window
        # None keeps fallback entries on the regular window.
        self.fallback_window = fallback_window
        self.always_refetch = always_refetch
        self.fallback_rates = normalize_rates(fallback_rates, cache.currencies)
        self.history = history
        self.clock = clock

        self._inflight: asyncio.Task[ExchangeRateMap] | None = None
        self._last_error: str | None = None

    @property
    def last_error(self) -> str | None:
        """Advisory message when the rates being served are not a clean fetch."""
        return self._last_error

    async def get_exchange_rates(self, force_refresh: bool = False) -> ExchangeRateMap:
        if self.cache.entry is None:
            await self.cache.load()

        if not force_refresh and not self.always_refetch and self._is_fresh():
            return dict(self.cache.entry.rates)

        if self._inflight is None:
            self._inflight = asyncio.create_task(self._refresh())

        # Shielded so one cancelled caller does not cancel the fetch for the rest.
        try:
            rates = await asyncio.shield(self._inflight)
        except Exception as e:
            logger.error(f"Unexpected error while refreshing exchange rates: {e}", exc_info=True)
            self._last_error = OUTDATED_WARNING
            entry = self.cache.entry
            rates = entry.rates if entry else self.fallback_rates
        return dict(rates)

    async def clear_cache(self) -> None:
        await self.cache.clear()
        self._last_error = None
        logger.info("Exchange rate cache cleared")

    def get_last_updated(self) -> datetime | None:
        entry = self.cache.entry
        return entry.fetched_at if entry else None

    def _is_fresh(self) -> bool:
        entry = self.cache.entry
        if entry is None:
            return False

        window = self.freshness_window
        if entry.is_fallback and self.fallback_window is not None:
            window = self.fallback_window
        return self.cache.is_fresh(self.clock(), window)

    async def _refresh(self) -> ExchangeRateMap:
        try:
            try:
                response = await self.source.fetch_rates()
                rates = normalize_rates(response.rates, self.cache.currencies)
            except Exception as e:
                logger.warning(f"Exchange rate fetch failed: {e}")
                return await self._recover()

            entry = CacheEntry(
                rates=rates,
                fetched_at=self.clock(),
                source=response.source,
                is_fallback=response.is_degraded,
            )
            await self.cache.save(entry)
            await self._record(entry)

            self._last_error = f"{OUTDATED_WARNING}: {response.error}" if response.error else None
            logger.info(f"Exchange rates updated from {entry.source}: {self._describe(rates)}")
            return entry.rates
        finally:
            self._inflight = None

    async def _recover(self) -> ExchangeRateMap:
        self._last_error = OUTDATED_WARNING

        entry = self.cache.entry
        if entry is not None:
            logger.warning(
                f"Serving cached exchange rates from {entry.fetched_at.isoformat()} ({entry.source})"
            )
            return entry.rates

        # Cached with a real timestamp so repeated failures inside the
        # freshness window do not go back to the network on every call.
        entry = CacheEntry(
            rates=dict(self.fallback_rates),
            fetched_at=self.clock(),
            source=FALLBACK_SOURCE,
            is_fallback=True,
        )
        await self.cache.save(entry)
        logger.warning(f"No cached exchange rates, using fallback: {self._describe(entry.rates)}")
        return entry.rates

    async def _record(self, entry: CacheEntry) -> None:
        if self.history is None:
            return
        try:
            await self.history.record(entry)
        except Exception as e:
            logger.error(f"Failed to record rate history: {e}")

    @staticmethod
    def _describe(rates: ExchangeRateMap) -> str:
        return ", ".join(f"{code}={rate}" for code, rate in sorted(rates.items()))
