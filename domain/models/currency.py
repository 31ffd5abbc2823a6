from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from domain.validation.currency import is_iso4217_currency, parse_currency_code


@dataclass(frozen=True)
class CurrencyPair:
	"""Ordered (base, target) pair. USD/EUR and EUR/USD are different keys."""

	base: str
	target: str

	def __post_init__(self):
		object.__setattr__(self, 'base', parse_currency_code(self.base))
		object.__setattr__(self, 'target', parse_currency_code(self.target))

	def __str__(self) -> str:
		return f'{self.base}->{self.target}'


@dataclass(frozen=True)
class RateSnapshot:
	base_currency: str | None
	as_of_date: date | None
	rates: dict[str, Decimal]
	success: bool
	provider_name: str
	fetched_at: datetime = field(default_factory=datetime.now)

	@classmethod
	def failure(cls, provider_name: str) -> 'RateSnapshot':
		return cls(
			base_currency=None,
			as_of_date=None,
			rates={},
			success=False,
			provider_name=provider_name,
		)

	@property
	def is_usable(self) -> bool:
		"""Successful, ISO 4217 base, non-empty and every rate finite and strictly positive."""
		return (
			self.success
			and self.base_currency is not None
			and is_iso4217_currency(self.base_currency)
			and bool(self.rates)
			and all(rate.is_finite() and rate > 0 for rate in self.rates.values())
		)


@dataclass(frozen=True)
class CachedRate:
	rate: Decimal
	source: str
	observed_at: datetime


@dataclass(frozen=True)
class RateSample:
	base_currency: str
	target_currency: str
	rate: Decimal
	source: str
	timestamp: datetime
	id: int | None = None


@dataclass(frozen=True)
class TrendResult:
	from_currency: str
	to_currency: str
	period: str
	oldest_rate: Decimal
	newest_rate: Decimal
	change_percentage: Decimal
	oldest_timestamp: datetime
	newest_timestamp: datetime
	sample_count: int


@dataclass(frozen=True)
class ConvertedAmount:
	original_amount: Decimal
	from_currency: str  # echoed as the caller sent it
	to_currency: str
	converted_amount: Decimal
	exchange_rate: Decimal
	source: str  # provider name, or 'same-currency'
	timestamp: datetime


@dataclass(frozen=True)
class ProviderFailure:
	provider_name: str
	reason: str


@dataclass
class ProviderStatus:
	name: str
	consecutive_failures: int = 0
	total_failures: int = 0
	total_successes: int = 0
	last_error: str | None = None
	last_success_at: datetime | None = None
	last_failure_at: datetime | None = None

	@property
	def healthy(self) -> bool:
		return self.consecutive_failures == 0
