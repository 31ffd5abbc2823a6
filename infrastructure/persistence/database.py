import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from infrastructure.persistence.models.currency import Base

logger = logging.getLogger(__name__)


class Database:
	"""Async engine and unit-of-work sessions for the rate sample store.

	File-backed SQLite runs in WAL mode with a busy timeout; the API and the
	maintenance worker may write to the same file.
	"""

	def __init__(self, db_url: str, echo: bool = False, busy_timeout_seconds: int = 30):
		url = make_url(db_url)
		self.is_sqlite = url.get_backend_name() == 'sqlite'
		self.is_memory = self.is_sqlite and url.database in (None, '', ':memory:')

		connect_args = {'timeout': busy_timeout_seconds} if self.is_sqlite else {}
		self.engine = create_async_engine(
			url,
			echo=echo,
			connect_args=connect_args,
			pool_pre_ping=not self.is_sqlite,
		)
		if self.is_sqlite and not self.is_memory:
			event.listen(self.engine.sync_engine, 'connect', _enable_wal)

		self.session_factory = async_sessionmaker(
			self.engine,
			class_=AsyncSession,
			autoflush=True,
			expire_on_commit=False,
		)

	async def create_tables(self) -> None:
		async with self.engine.begin() as conn:
			await conn.run_sync(Base.metadata.create_all)
		logger.info(f'Ensured tables: {", ".join(sorted(Base.metadata.tables))}')

	async def drop_tables(self) -> None:
		async with self.engine.begin() as conn:
			await conn.run_sync(Base.metadata.drop_all)

	async def ping(self) -> bool:
		async with self.engine.connect() as conn:
			await conn.execute(text('SELECT 1'))
		return True

	async def close(self) -> None:
		await self.engine.dispose()

	@asynccontextmanager
	async def session(self) -> AsyncIterator[AsyncSession]:
		"""Commit on normal exit, roll back and re-raise on any error."""
		async with self.session_factory() as session:
			try:
				yield session
				await session.commit()
			except Exception:
				await session.rollback()
				raise


def _enable_wal(dbapi_connection, connection_record) -> None:
	cursor = dbapi_connection.cursor()
	cursor.execute('PRAGMA journal_mode=WAL')
	cursor.close()
