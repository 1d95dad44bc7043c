import logging
from collections.abc import AsyncGenerator
from datetime import timedelta
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from application.services import (
	BudgetAlertService,
	ConversionService,
	ExchangeRateService,
	RelayService,
)
from application.workers.rate_refresher import RateRefresherWorker
from config.settings import Settings, get_settings
from domain.models.currency import BASE_CURRENCY
from infrastructure.cache.rate_cache import RateCache
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import (
	RateHistoryRecorder,
	RateHistoryRepository,
)
from infrastructure.providers import KursnaListaProvider, RelayRateSource

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	upstream: KursnaListaProvider | None = None
	rate_source: RelayRateSource | None = None
	rate_service: ExchangeRateService | None = None
	relay_service: RelayService | None = None
	refresher: RateRefresherWorker | None = None


deps = AppDependencies()


def init_dependencies(settings: Settings | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()
	currencies = tuple(code.upper() for code in settings.FOREIGN_CURRENCIES if code.upper() != BASE_CURRENCY)

	deps.db = Database(settings.DATABASE_URL, echo=settings.DEBUG)
	deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)

	deps.upstream = KursnaListaProvider(
		settings.KURSNA_LISTA_API_ID,
		timeout=settings.HTTP_TIMEOUT_SECONDS,
		retry_attempts=settings.UPSTREAM_RETRY_ATTEMPTS,
	)
	deps.relay_service = RelayService(deps.upstream, currencies=currencies)

	deps.rate_source = RelayRateSource(
		settings.RELAY_URL,
		timeout=settings.HTTP_TIMEOUT_SECONDS,
		currencies=currencies,
	)
	fallback_window = (
		timedelta(minutes=settings.FALLBACK_FRESHNESS_MINUTES)
		if settings.FALLBACK_FRESHNESS_MINUTES is not None
		else None
	)
	deps.rate_service = ExchangeRateService(
		cache=RateCache(deps.redis_client, currencies=currencies),
		source=deps.rate_source,
		freshness_window=timedelta(hours=settings.RATE_FRESHNESS_HOURS),
		fallback_window=fallback_window,
		always_refetch=settings.ALWAYS_REFETCH,
		history=RateHistoryRecorder(deps.db),
	)
	deps.refresher = RateRefresherWorker(
		deps.rate_service, update_interval=settings.REFRESH_INTERVAL_MINUTES * 60
	)
	logger.info(f'Dependencies initialized for currencies {", ".join(currencies)}')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.refresher:
		await deps.refresher.stop()
	if deps.rate_source:
		await deps.rate_source.close()
	if deps.upstream:
		await deps.upstream.close()
	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()

	logger.info('Cleanup complete')


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')

	async with deps.db.session() as session:
		yield session


def get_database() -> Database:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')
	return deps.db


def get_redis_client() -> Redis:
	if deps.redis_client is None:
		raise RuntimeError('Redis client not initialized')
	return deps.redis_client


def get_rate_service() -> ExchangeRateService:
	if deps.rate_service is None:
		raise RuntimeError('Exchange rate service not initialized')
	return deps.rate_service


def get_relay_service() -> RelayService:
	if deps.relay_service is None:
		raise RuntimeError('Relay service not initialized')
	return deps.relay_service


async def get_rate_history_repository(
	session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RateHistoryRepository:
	return RateHistoryRepository(db_session=session)


async def get_conversion_service(
	rate_service: Annotated[ExchangeRateService, Depends(get_rate_service)],
) -> ConversionService:
	return ConversionService(rate_service=rate_service)


async def get_budget_alert_service(
	rate_service: Annotated[ExchangeRateService, Depends(get_rate_service)],
) -> BudgetAlertService:
	return BudgetAlertService(rate_service=rate_service)
