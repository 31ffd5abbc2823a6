import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from application.services.rate_service import RateService
from infrastructure.persistence.repositories.currency import RateSampleRepository

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(days=395)


class MaintenanceService:
	"""Entry points for the periodic trigger: rate refresh and sample retention."""

	def __init__(
		self,
		rate_service: RateService,
		sample_repository: RateSampleRepository,
		retention: timedelta = DEFAULT_RETENTION,
		clock: Callable[[], datetime] = datetime.now,
	):
		self.rate_service = rate_service
		self.sample_repository = sample_repository
		self.retention = retention
		self._clock = clock

	async def refresh_rates(self) -> int:
		cached = await self.rate_service.refresh()
		logger.info(f'Scheduled exchange rates update completed: {cached} rates cached')
		return cached

	async def cleanup_old_samples(self, now: datetime | None = None) -> int:
		cutoff = (now or self._clock()) - self.retention
		logger.info(f'Starting cleanup of exchange rate samples older than {cutoff.isoformat()}')
		deleted = await self.sample_repository.delete_samples_older_than(cutoff)
		logger.info(f'Cleanup completed. Deleted {deleted} old exchange rate samples')
		return deleted
