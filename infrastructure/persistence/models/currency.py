from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class RateHistoryDB(Base):
	__tablename__ = 'rate_history'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	currency: Mapped[str] = mapped_column(String(5), nullable=False)
	rate: Mapped[Decimal] = mapped_column(DECIMAL(precision=18, scale=6), nullable=False)
	fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
	source: Mapped[str] = mapped_column(String(50), nullable=False)
	is_fallback: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

	__table_args__ = (Index('idx_rate_history_currency', 'currency'),)
