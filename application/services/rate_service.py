import logging
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from application.services.provider_aggregator import ProviderAggregator
from domain.exceptions.currency import ProviderError, RateUnavailableError
from domain.models.currency import CachedRate, CurrencyPair, RateSample, RateSnapshot
from infrastructure.cache.memory_cache import RateCache
from infrastructure.persistence.repositories.currency import RateSampleRepository

if TYPE_CHECKING:
	from application.services.currency_service import CurrencyService

logger = logging.getLogger(__name__)

RATE_SCALE = Decimal('0.000001')


def triangulate(from_currency: str, to_currency: str, snapshot: RateSnapshot) -> Decimal | None:
	"""Derive from->to out of a snapshot quoted against its own base currency.

	Direct quotes are returned as given; inverse and cross rates are rounded
	half-up to six decimals. A missing leg yields None.
	"""
	base = snapshot.base_currency
	rates = snapshot.rates

	if from_currency == base:
		if to_currency == base:
			return Decimal('1')
		return rates.get(to_currency)

	if to_currency == base:
		from_rate = rates.get(from_currency)
		if from_rate is None:
			return None
		return (Decimal('1') / from_rate).quantize(RATE_SCALE, rounding=ROUND_HALF_UP)

	from_rate = rates.get(from_currency)
	to_rate = rates.get(to_currency)
	if from_rate is None or to_rate is None:
		return None
	return (to_rate / from_rate).quantize(RATE_SCALE, rounding=ROUND_HALF_UP)


class RateService:
	"""Cache-first rate lookup with provider fallback.

	``get_rate`` treats an exhausted provider list as "no rate" and returns
	None. ``refresh`` is an explicit operator action and raises
	RateUnavailableError for the same condition.
	"""

	def __init__(
		self,
		aggregator: ProviderAggregator,
		cache: RateCache,
		sample_repository: RateSampleRepository | None = None,
		currency_service: 'CurrencyService | None' = None,
		clock: Callable[[], datetime] = datetime.now,
	):
		self.aggregator = aggregator
		self.cache = cache
		self.sample_repository = sample_repository
		self.currency_service = currency_service
		self._clock = clock

	async def get_rate(self, from_currency: str, to_currency: str) -> Decimal | None:
		details = await self.get_rate_details(from_currency, to_currency)
		return details.rate if details else None

	async def get_rate_details(self, from_currency: str, to_currency: str) -> CachedRate | None:
		pair = CurrencyPair(from_currency, to_currency)

		cached = self.cache.get(pair)
		if cached is not None:
			logger.info(f'Cache HIT: {pair}')
			return cached

		logger.info(f'Cache MISS: {pair}, fetching from providers')
		try:
			snapshot = await self.aggregator.resolve_latest()
		except ProviderError as e:
			logger.error(f'No rate available for {pair}: {e}')
			return None

		await self._store_snapshot(snapshot)

		rate = triangulate(pair.base, pair.target, snapshot)
		if rate is None:
			logger.warning(
				f'Snapshot from {snapshot.provider_name} (base {snapshot.base_currency}) '
				f'has no quote for {pair}'
			)
			return None

		return self.cache.put(pair, rate, snapshot.provider_name)

	async def refresh(self) -> int:
		logger.info('Refreshing exchange rates from providers')
		self.cache.clear()

		try:
			snapshot = await self.aggregator.resolve_latest()
		except ProviderError as e:
			logger.error(f'Failed to refresh exchange rates: {e}')
			raise RateUnavailableError(f'Failed to refresh exchange rates: {e}') from e

		if not snapshot.is_usable:
			raise RateUnavailableError(
				'Failed to refresh exchange rates: provider returned unsuccessful response'
			)

		cached = await self._store_snapshot(snapshot, strict=True)
		logger.info(f'Exchange rates refreshed. Cached {cached} rates from {snapshot.provider_name}')
		return cached

	async def _store_snapshot(self, snapshot: RateSnapshot, strict: bool = False) -> int:
		"""Cache every base->target quote, then record them as samples.

		With ``strict`` a recording failure is raised as RateUnavailableError;
		otherwise it is logged and the pending samples are rolled back.
		"""
		base = snapshot.base_currency
		cached: list[tuple[CurrencyPair, Decimal]] = []
		for target, rate in snapshot.rates.items():
			if target == base:
				continue
			pair = CurrencyPair(base, target)
			self.cache.put(pair, rate, snapshot.provider_name)
			cached.append((pair, rate))

		try:
			await self._record_samples(cached, snapshot.provider_name)
		except Exception as e:
			if strict:
				logger.error(f'Failed to record rate samples from {snapshot.provider_name}: {e}')
				raise RateUnavailableError(f'Failed to store rate samples: {e}') from e
			logger.exception(f'Failed to record rate samples from {snapshot.provider_name}')
			await self.sample_repository.rollback()
		return len(cached)

	async def _record_samples(self, quotes: list[tuple[CurrencyPair, Decimal]], source: str) -> None:
		if self.sample_repository is None or not quotes:
			return

		if self.currency_service is not None:
			supported = set(await self.currency_service.get_supported_currencies())
			if supported:
				quotes = [(p, r) for p, r in quotes if p.target in supported]

		now = self._clock()
		samples = [
			RateSample(
				base_currency=pair.base,
				target_currency=pair.target,
				rate=rate,
				source=source,
				timestamp=now,
			)
			for pair, rate in quotes
		]
		saved = await self.sample_repository.insert_samples(samples)
		logger.info(f'Saved {saved} rate samples from {source}')
