from .responses import (
	ConversionResponse,
	CurrencyAddedResponse,
	ExchangeRateResponse,
	HealthResponse,
	ProviderHealth,
	RefreshResponse,
	SupportedCurrenciesResponse,
	TrendsResponse,
)

__all__ = [
	'ConversionResponse',
	'CurrencyAddedResponse',
	'ExchangeRateResponse',
	'HealthResponse',
	'ProviderHealth',
	'RefreshResponse',
	'SupportedCurrenciesResponse',
	'TrendsResponse',
]
