import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from domain.exceptions.currency import InsufficientDataError
from domain.models.currency import TrendResult
from domain.validation.currency import parse_currency_code, parse_period
from infrastructure.persistence.repositories.currency import RateSampleRepository

logger = logging.getLogger(__name__)

CALCULATION_SCALE = Decimal('0.000001')
RESULT_SCALE = Decimal('0.01')
MIN_SAMPLES = 2


def percentage_change(oldest: Decimal, newest: Decimal) -> Decimal:
	if oldest == 0:
		return Decimal('0')
	ratio = ((newest - oldest) / oldest).quantize(CALCULATION_SCALE, rounding=ROUND_HALF_UP)
	return (ratio * 100).quantize(RESULT_SCALE, rounding=ROUND_HALF_UP)


class TrendsService:
	"""Rate movement over a trailing window of stored samples. Never cached."""

	def __init__(
		self,
		repository: RateSampleRepository,
		clock: Callable[[], datetime] = datetime.now,
	):
		self.repository = repository
		self._clock = clock

	async def calculate_trend(self, from_currency: str, to_currency: str, period: str) -> TrendResult:
		base = parse_currency_code(from_currency)
		target = parse_currency_code(to_currency)
		parsed_period = parse_period(period)
		logger.info(f'Calculating trends for {base} -> {target} over period {parsed_period}')

		end = self._clock()
		start = end - parsed_period.duration
		samples = await self.repository.query_samples_in_range(base, target, start, end)
		logger.info(f'Found {len(samples)} data points for trend analysis')

		if len(samples) < MIN_SAMPLES:
			raise InsufficientDataError(base, target, parsed_period.text, len(samples))

		oldest, newest = samples[0], samples[-1]
		change = percentage_change(oldest.rate, newest.rate)
		logger.info(f'Trend: {base} -> {target}, Change: {change}%')

		return TrendResult(
			from_currency=base,
			to_currency=target,
			period=parsed_period.text,
			oldest_rate=oldest.rate,
			newest_rate=newest.rate,
			change_percentage=change,
			oldest_timestamp=oldest.timestamp,
			newest_timestamp=newest.timestamp,
			sample_count=len(samples),
		)
