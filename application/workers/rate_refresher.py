import asyncio
import contextlib
import logging
from datetime import datetime

from application.services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)


class RateRefresherWorker:
    """
    Background task that keeps the exchange rate cache warm.

    Each cycle goes through the normal cache policy, so a cycle inside the
    freshness window costs nothing and a failing relay never stops the loop.
    """

    def __init__(self, rate_service: ExchangeRateService, update_interval: float = 30 * 60):
        """
        Args:
            rate_service: Shared exchange rate service
            update_interval: Seconds between refresh cycles (default: 30 minutes)
        """
        self.rate_service = rate_service
        self.update_interval = update_interval
        self.is_running = False
        self._task: asyncio.Task | None = None

    async def refresh_cycle(self) -> None:
        cycle_start = datetime.now()
        rates = await self.rate_service.get_exchange_rates()
        cycle_duration = (datetime.now() - cycle_start).total_seconds()

        message = f"Refresh cycle completed in {cycle_duration:.2f}s ({len(rates)} rates)"
        if self.rate_service.last_error:
            message += f": {self.rate_service.last_error}"
        logger.info(message)

    async def run(self) -> None:
        """Main worker loop. Runs until stopped or cancelled."""
        self.is_running = True
        logger.info(f"Rate refresher started, interval {self.update_interval}s")

        while self.is_running:
            try:
                await self.refresh_cycle()
                await asyncio.sleep(self.update_interval)
            except asyncio.CancelledError:
                logger.info("Rate refresher received cancellation signal")
                break
            except Exception as e:
                logger.error(f"Error in refresh cycle: {e}", exc_info=True)
                await asyncio.sleep(self.update_interval)

        self.is_running = False
        logger.info("Rate refresher stopped")

    def start(self) -> asyncio.Task:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())
        return self._task

    async def stop(self) -> None:
        self.is_running = False
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
