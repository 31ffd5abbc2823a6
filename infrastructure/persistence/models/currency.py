from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class SupportedCurrencyDB(Base):
	__tablename__ = 'supported_currencies'

	code: Mapped[str] = mapped_column(String(3), primary_key=True)
	added_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())


class RateSampleDB(Base):
	__tablename__ = 'rate_samples'

	id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
	base_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	target_currency: Mapped[str] = mapped_column(String(3), nullable=False)
	rate: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=10), nullable=False)
	source: Mapped[str] = mapped_column(String(50), nullable=False)
	timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

	__table_args__ = (
		Index('idx_rate_samples_pair_timestamp', 'base_currency', 'target_currency', 'timestamp'),
	)
