import logging
from collections.abc import Callable, Sequence
from datetime import datetime

from domain.exceptions.currency import AllProvidersFailedError
from domain.models.currency import ProviderFailure, ProviderStatus, RateSnapshot
from domain.validation.currency import is_iso4217_currency
from infrastructure.providers.base import ExchangeRateProvider

logger = logging.getLogger(__name__)


class ProviderAggregator:
	"""Ordered failover across rate providers.

	Providers are awaited one at a time in the order given; the first usable
	snapshot wins and the remaining providers are not called.
	"""

	def __init__(
		self,
		providers: Sequence[ExchangeRateProvider],
		clock: Callable[[], datetime] = datetime.now,
	):
		self.providers = tuple(providers)
		self._clock = clock
		self._statuses = {p.name: ProviderStatus(name=p.name) for p in self.providers}

	@property
	def provider_names(self) -> list[str]:
		return [p.name for p in self.providers]

	async def resolve_latest(self, symbols: Sequence[str] | None = None) -> RateSnapshot:
		failures: list[ProviderFailure] = []

		for provider in self.providers:
			logger.info(f'Trying to get rates from provider: {provider.name}')
			try:
				snapshot = await provider.fetch_latest(symbols=symbols)
				usable = snapshot.is_usable
			except Exception as e:
				reason = str(e) or e.__class__.__name__
				logger.warning(f'Provider {provider.name} failed with error: {reason}')
				failures.append(self._record_failure(provider.name, reason))
				continue

			if not usable:
				reason = self._describe_unusable(snapshot)
				logger.warning(f'Provider {provider.name} returned an unusable response: {reason}')
				failures.append(self._record_failure(provider.name, reason))
				continue

			self._record_success(provider.name)
			logger.info(
				f'Successfully got {len(snapshot.rates)} rates from provider: {provider.name} '
				f'(base {snapshot.base_currency})'
			)
			return snapshot

		logger.error(f'All {len(self.providers)} providers failed')
		raise AllProvidersFailedError(failures)

	def provider_statuses(self) -> list[ProviderStatus]:
		return [self._statuses[name] for name in self.provider_names]

	@staticmethod
	def _describe_unusable(snapshot: RateSnapshot) -> str:
		if not snapshot.success:
			return 'unsuccessful response'
		if snapshot.base_currency is None:
			return 'missing base currency'
		if not is_iso4217_currency(snapshot.base_currency):
			return f'unknown base currency {snapshot.base_currency}'
		if not snapshot.rates:
			return 'empty rates'
		bad = sorted(code for code, rate in snapshot.rates.items() if not (rate.is_finite() and rate > 0))
		return f'non-finite or non-positive rates for {", ".join(bad)}'

	def _record_failure(self, name: str, reason: str) -> ProviderFailure:
		status = self._statuses[name]
		status.consecutive_failures += 1
		status.total_failures += 1
		status.last_error = reason
		status.last_failure_at = self._clock()
		return ProviderFailure(provider_name=name, reason=reason)

	def _record_success(self, name: str) -> None:
		status = self._statuses[name]
		status.consecutive_failures = 0
		status.total_successes += 1
		status.last_success_at = self._clock()
