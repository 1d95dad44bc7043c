import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from domain.models.currency import BASE_CURRENCY, CacheEntry
from infrastructure.persistence.database import Database
from infrastructure.persistence.models.currency import RateHistoryDB

logger = logging.getLogger(__name__)


class RateHistoryRepository:
	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def save_entry(self, entry: CacheEntry) -> None:
		self.db_session.add_all(
			[
				RateHistoryDB(
					currency=code,
					rate=rate,
					fetched_at=entry.fetched_at,
					source=entry.source,
					is_fallback=entry.is_fallback,
				)
				for code, rate in entry.rates.items()
				if code != BASE_CURRENCY
			]
		)

	async def get_history(
		self, currency: str | None = None, since: datetime | None = None, limit: int = 100
	) -> list[RateHistoryDB]:
		stmt = select(RateHistoryDB)
		if currency:
			stmt = stmt.filter(RateHistoryDB.currency == currency)
		if since:
			stmt = stmt.filter(RateHistoryDB.fetched_at >= since)
		stmt = stmt.order_by(RateHistoryDB.fetched_at.desc(), RateHistoryDB.id.desc()).limit(limit)

		result = await self.db_session.execute(stmt)
		return list(result.scalars().all())


class RateHistoryRecorder:
	"""Appends fetched rate maps to history in their own session, never raising."""

	def __init__(self, db: Database):
		self.db = db

	async def record(self, entry: CacheEntry) -> None:
		try:
			async with self.db.session() as session:
				await RateHistoryRepository(session).save_entry(entry)
		except SQLAlchemyError as e:
			logger.error(f'Failed to record rate history: {e}')
