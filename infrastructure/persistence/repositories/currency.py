from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.models.currency import RateSample
from infrastructure.persistence.models.currency import RateSampleDB, SupportedCurrencyDB


def _to_domain(row: RateSampleDB) -> RateSample:
	return RateSample(
		id=row.id,
		base_currency=row.base_currency,
		target_currency=row.target_currency,
		rate=row.rate,
		source=row.source,
		timestamp=row.timestamp,
	)


class RateSampleRepository:
	"""Append-only store of observed rates. Samples are never updated."""

	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def insert_sample(self, sample: RateSample) -> None:
		await self.insert_samples([sample])

	async def insert_samples(self, samples: Iterable[RateSample]) -> int:
		rows = [
			RateSampleDB(
				base_currency=s.base_currency,
				target_currency=s.target_currency,
				rate=s.rate,
				source=s.source,
				timestamp=s.timestamp,
			)
			for s in samples
		]
		if rows:
			self.db_session.add_all(rows)
			await self.db_session.flush()
		return len(rows)

	async def query_samples_in_range(
		self, base: str, target: str, start: datetime, end: datetime
	) -> list[RateSample]:
		stmt = (
			select(RateSampleDB)
			.where(
				RateSampleDB.base_currency == base,
				RateSampleDB.target_currency == target,
				RateSampleDB.timestamp >= start,
				RateSampleDB.timestamp <= end,
			)
			.order_by(RateSampleDB.timestamp.asc(), RateSampleDB.id.asc())
		)
		result = await self.db_session.execute(stmt)
		return [_to_domain(row) for row in result.scalars().all()]

	async def delete_samples_older_than(self, cutoff: datetime) -> int:
		result = await self.db_session.execute(
			delete(RateSampleDB).where(RateSampleDB.timestamp < cutoff)
		)
		return result.rowcount or 0

	async def rollback(self) -> None:
		"""Discard samples added but not yet committed."""
		await self.db_session.rollback()


class SupportedCurrencyRepository:
	def __init__(self, db_session: AsyncSession):
		self.db_session = db_session

	async def list_codes(self) -> list[str]:
		result = await self.db_session.execute(
			select(SupportedCurrencyDB.code).order_by(SupportedCurrencyDB.code)
		)
		return list(result.scalars().all())

	async def exists(self, code: str) -> bool:
		return await self.db_session.get(SupportedCurrencyDB, code) is not None

	async def add(self, code: str) -> None:
		self.db_session.add(SupportedCurrencyDB(code=code))
		await self.db_session.flush()
