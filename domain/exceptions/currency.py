from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from domain.models.currency import ProviderFailure


class CurrencyException(Exception):
	pass


class InvalidCurrencyError(CurrencyException):
	def __init__(self, code: str | None):
		self.code = code
		if code is None or not code.strip():
			message = 'Currency code cannot be null or empty'
		else:
			message = f'Invalid currency code: {code}'
		super().__init__(message)


class InvalidPeriodError(CurrencyException):
	def __init__(self, period: str | None, reason: str = 'expected digits followed by H, D, M or Y'):
		self.period = period
		self.reason = reason
		super().__init__(f'Invalid period {period!r}: {reason}')


class CurrencyNotSupportedError(CurrencyException):
	def __init__(self, code: str, supported: Sequence[str]):
		self.code = code
		self.supported = list(supported)
		super().__init__(
			f'Currency {code} is not supported. Supported currencies: {", ".join(self.supported)}'
		)


class ProviderError(CurrencyException):
	pass


class AllProvidersFailedError(ProviderError):
	"""Every configured provider threw or answered unsuccessfully."""

	def __init__(self, failures: Sequence['ProviderFailure']):
		self.failures = list(failures)
		names = ', '.join(f.provider_name for f in self.failures) or 'none configured'
		super().__init__(f'All exchange rate providers failed: {names}')

	@property
	def provider_names(self) -> list[str]:
		return [f.provider_name for f in self.failures]


class RateUnavailableError(CurrencyException):
	pass


class RateNotAvailableError(CurrencyException):
	def __init__(self, from_currency: str, to_currency: str):
		self.from_currency = from_currency
		self.to_currency = to_currency
		super().__init__(f'Exchange rate not available for {from_currency} -> {to_currency}')


class InsufficientDataError(CurrencyException):
	def __init__(self, from_currency: str, to_currency: str, period: str, sample_count: int):
		self.from_currency = from_currency
		self.to_currency = to_currency
		self.period = period
		self.sample_count = sample_count
		super().__init__(
			f'Insufficient data for trend analysis of {from_currency} -> {to_currency} '
			f'over {period}. Found {sample_count} data points, need at least 2'
		)


class CacheError(CurrencyException):
	pass
