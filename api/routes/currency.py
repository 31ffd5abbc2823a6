import logging
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import (
	get_conversion_service,
	get_currency_service,
	get_maintenance_service,
	get_rate_service,
	get_trends_service,
)
from api.schemas import (
	ConversionResponse,
	CurrencyAddedResponse,
	ExchangeRateResponse,
	RefreshResponse,
	SupportedCurrenciesResponse,
	TrendsResponse,
)
from application.services import (
	ConversionService,
	CurrencyService,
	MaintenanceService,
	RateService,
	TrendsService,
)
from domain.exceptions.currency import RateNotAvailableError
from domain.validation.currency import parse_currency_code, parse_period, validate_period_limits

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1/currencies', tags=['currency'])

CurrencyQuery = Annotated[str, Query(min_length=1, max_length=10)]


@router.get(
	'',
	response_model=SupportedCurrenciesResponse,
	status_code=status.HTTP_200_OK,
	summary='List supported currencies',
)
async def get_supported_currencies(
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> SupportedCurrenciesResponse:
	currencies = await service.get_supported_currencies()
	return SupportedCurrenciesResponse(currencies=currencies)


@router.post(
	'',
	response_model=CurrencyAddedResponse,
	status_code=status.HTTP_200_OK,
	summary='Add a supported currency',
)
async def add_currency(
	currency: CurrencyQuery,
	service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> CurrencyAddedResponse:
	code = parse_currency_code(currency)
	added = await service.add_currency(code)
	message = f'Currency {code} added successfully' if added else f'Currency {code} already exists'
	return CurrencyAddedResponse(currency=code, added=added, message=message)


@router.get(
	'/exchange-rates',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert currency amount',
)
async def convert_currency(
	amount: Annotated[Decimal, Query(gt=0)],
	from_currency: Annotated[str, Query(alias='from', min_length=1, max_length=10)],
	to_currency: Annotated[str, Query(alias='to', min_length=1, max_length=10)],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	logger.info(f'GET /api/v1/currencies/exchange-rates - converting {amount} {from_currency} to {to_currency}')
	result = await service.convert(amount, from_currency, to_currency)
	return ConversionResponse(
		original_amount=result.original_amount,
		from_currency=result.from_currency,
		to_currency=result.to_currency,
		converted_amount=result.converted_amount,
		exchange_rate=result.exchange_rate,
		source=result.source,
		timestamp=result.timestamp,
	)


@router.get(
	'/rate/{from_currency}/{to_currency}',
	response_model=ExchangeRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get current exchange rate',
)
async def get_exchange_rate(
	from_currency: Annotated[str, Path(min_length=3, max_length=3)],
	to_currency: Annotated[str, Path(min_length=3, max_length=3)],
	service: Annotated[RateService, Depends(get_rate_service)],
) -> ExchangeRateResponse:
	base = parse_currency_code(from_currency)
	target = parse_currency_code(to_currency)

	details = await service.get_rate_details(base, target)
	if details is None:
		raise RateNotAvailableError(base, target)

	return ExchangeRateResponse(
		from_currency=base,
		to_currency=target,
		rate=details.rate,
		timestamp=details.observed_at,
		source=details.source,
	)


@router.post(
	'/refresh',
	response_model=RefreshResponse,
	status_code=status.HTTP_200_OK,
	summary='Refresh exchange rates from providers',
)
async def refresh_rates(
	service: Annotated[MaintenanceService, Depends(get_maintenance_service)],
) -> RefreshResponse:
	cached = await service.refresh_rates()
	return RefreshResponse(rates_cached=cached, message='Exchange rates updated successfully')


@router.get(
	'/trends',
	response_model=TrendsResponse,
	status_code=status.HTTP_200_OK,
	summary='Rate change over a period',
)
async def get_trends(
	from_currency: Annotated[str, Query(alias='from', min_length=1, max_length=10)],
	to_currency: Annotated[str, Query(alias='to', min_length=1, max_length=10)],
	period: Annotated[str, Query(min_length=2, max_length=10)],
	service: Annotated[TrendsService, Depends(get_trends_service)],
) -> TrendsResponse:
	parse_currency_code(from_currency)
	parse_currency_code(to_currency)
	validate_period_limits(parse_period(period))

	result = await service.calculate_trend(from_currency, to_currency, period)
	return TrendsResponse(
		from_currency=result.from_currency,
		to_currency=result.to_currency,
		period=result.period,
		oldest_rate=result.oldest_rate,
		newest_rate=result.newest_rate,
		change_percentage=result.change_percentage,
		oldest_timestamp=result.oldest_timestamp,
		newest_timestamp=result.newest_timestamp,
		sample_count=result.sample_count,
	)
