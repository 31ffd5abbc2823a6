import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta

from dotenv import load_dotenv

from api.dependencies import AppDependencies, cleanup_dependencies, init_dependencies
from application.services import CurrencyService, MaintenanceService, RateService
from config.settings import Settings, get_settings
from infrastructure.monitoring.logger import configure_logging
from infrastructure.persistence.repositories.currency import (
	RateSampleRepository,
	SupportedCurrencyRepository,
)

load_dotenv()

logger = logging.getLogger(__name__)

MaintenanceJob = Callable[[], Awaitable[int]]


class MaintenanceWorker:
	"""
	Periodic trigger for rate refresh and sample retention cleanup.

	Runs independently of the FastAPI server. A failed job is logged and
	retried on its next tick; it never stops the loop.
	"""

	def __init__(
		self,
		refresh_job: MaintenanceJob,
		cleanup_job: MaintenanceJob,
		refresh_interval: timedelta,
		cleanup_interval: timedelta,
		tick_seconds: float = 1.0,
		clock: Callable[[], datetime] = datetime.now,
	):
		self.refresh_job = refresh_job
		self.cleanup_job = cleanup_job
		self.refresh_interval = refresh_interval
		self.cleanup_interval = cleanup_interval
		self.tick_seconds = tick_seconds
		self._clock = clock
		self._next_refresh: datetime | None = None
		self._next_cleanup: datetime | None = None
		self.is_running = False

	async def run_pending(self) -> None:
		"""Run whichever jobs are due. Refresh is due immediately on the first call."""
		now = self._clock()
		if self._next_refresh is None or now >= self._next_refresh:
			await self._run('refresh', self.refresh_job)
			self._next_refresh = now + self.refresh_interval
		if self._next_cleanup is None:
			self._next_cleanup = now + self.cleanup_interval
		elif now >= self._next_cleanup:
			await self._run('cleanup', self.cleanup_job)
			self._next_cleanup = now + self.cleanup_interval

	async def run(self) -> None:
		self.is_running = True
		logger.info(
			f'Maintenance worker started (refresh every {self.refresh_interval}, '
			f'cleanup every {self.cleanup_interval})'
		)
		while self.is_running:
			try:
				await self.run_pending()
				await asyncio.sleep(self.tick_seconds)
			except asyncio.CancelledError:
				logger.info('Worker received cancellation signal')
				break
		logger.info('Maintenance worker stopped')

	def stop(self) -> None:
		logger.info('Stopping maintenance worker...')
		self.is_running = False

	async def _run(self, name: str, job: MaintenanceJob) -> None:
		logger.info(f'Starting scheduled {name}')
		try:
			result = await job()
			logger.info(f'Scheduled {name} completed ({result})')
		except Exception as e:
			logger.error(f'Scheduled {name} failed: {e}', exc_info=True)


def build_jobs(deps: AppDependencies, settings: Settings) -> tuple[MaintenanceJob, MaintenanceJob]:
	"""Each job run opens its own session and commits it when the job returns."""

	async def with_service(action: Callable[[MaintenanceService], Awaitable[int]]) -> int:
		async with deps.db.session() as session:
			samples = RateSampleRepository(session)
			currency_service = CurrencyService(SupportedCurrencyRepository(session), deps.redis_cache)
			rate_service = RateService(
				aggregator=deps.aggregator,
				cache=deps.rate_cache,
				sample_repository=samples,
				currency_service=currency_service,
			)
			service = MaintenanceService(rate_service, samples, retention=settings.retention)
			return await action(service)

	async def refresh() -> int:
		return await with_service(lambda s: s.refresh_rates())

	async def cleanup() -> int:
		return await with_service(lambda s: s.cleanup_old_samples())

	return refresh, cleanup


async def main() -> None:
	settings = get_settings()
	configure_logging(settings.LOG_LEVEL, settings.LOG_DIRECTORY, settings.LOG_TO_FILE)

	deps = init_dependencies(settings)
	await deps.db.create_tables()
	refresh, cleanup = build_jobs(deps, settings)

	worker = MaintenanceWorker(
		refresh_job=refresh,
		cleanup_job=cleanup,
		refresh_interval=timedelta(seconds=settings.REFRESH_INTERVAL_SECONDS),
		cleanup_interval=timedelta(seconds=settings.CLEANUP_INTERVAL_SECONDS),
	)

	loop = asyncio.get_running_loop()
	for sig in (signal.SIGINT, signal.SIGTERM):
		loop.add_signal_handler(sig, worker.stop)

	try:
		await worker.run()
	finally:
		await cleanup_dependencies()
		logger.info('Cleanup completed')


if __name__ == '__main__':
	asyncio.run(main())
