from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class ConversionResponse(BaseModel):
	success: bool = Field(True, description='Whether the conversion succeeded')
	original_amount: Decimal = Field(..., description='Original amount requested')
	from_currency: str = Field(..., description='Source currency code, as sent')
	to_currency: str = Field(..., description='Target currency code, as sent')
	converted_amount: Decimal = Field(..., description='Converted amount, 6 decimal places')
	exchange_rate: Decimal = Field(..., description='Exchange rate used for conversion')
	source: str = Field(..., description='Provider that supplied the rate, or same-currency')
	timestamp: datetime = Field(..., description='When the conversion was computed')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'success': True,
				'original_amount': 100.00,
				'from_currency': 'USD',
				'to_currency': 'EUR',
				'converted_amount': 85.5,
				'exchange_rate': 0.855,
				'source': 'fixerio',
				'timestamp': '2025-09-27T10:30:00Z',
			}
		}
	)


class ExchangeRateResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	rate: Decimal = Field(..., description='Resolved exchange rate')
	timestamp: datetime = Field(..., description='When the rate was observed')
	source: str = Field(..., description='Provider the rate came from')


class SupportedCurrenciesResponse(BaseModel):
	currencies: list[str] = Field(description='List of currency codes')

	model_config = ConfigDict(
		json_schema_extra={'examples': [{'currencies': ['USD', 'EUR', 'GBP', 'JPY']}]}
	)


class CurrencyAddedResponse(BaseModel):
	currency: str
	added: bool
	message: str


class RefreshResponse(BaseModel):
	rates_cached: int
	message: str


class TrendsResponse(BaseModel):
	from_currency: str
	to_currency: str
	period: str
	oldest_rate: Decimal
	newest_rate: Decimal
	change_percentage: Decimal = Field(..., description='Percent change, 2 decimal places')
	oldest_timestamp: datetime
	newest_timestamp: datetime
	sample_count: int


class ProviderHealth(BaseModel):
	name: str
	healthy: bool
	consecutive_failures: int
	total_failures: int
	total_successes: int
	last_error: str | None = None
	last_success_at: datetime | None = None
	last_failure_at: datetime | None = None


class HealthResponse(BaseModel):
	status: str = Field(..., description='healthy, degraded or unhealthy')
	timestamp: datetime
	database: str
	cache: str
	cached_rates: int
	providers: list[ProviderHealth]
