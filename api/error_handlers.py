import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	CurrencyNotSupportedError,
	InsufficientDataError,
	InvalidCurrencyError,
	InvalidPeriodError,
	ProviderError,
	RateNotAvailableError,
	RateUnavailableError,
)

logger = logging.getLogger(__name__)


def _problem(status_code: int, title: str, detail: str) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={'title': title, 'detail': detail})


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidCurrencyError)
	async def invalid_currency_handler(request: Request, exc: InvalidCurrencyError):
		return _problem(status.HTTP_400_BAD_REQUEST, 'Invalid currency code', str(exc))

	@app.exception_handler(InvalidPeriodError)
	async def invalid_period_handler(request: Request, exc: InvalidPeriodError):
		return _problem(status.HTTP_400_BAD_REQUEST, 'Invalid period', str(exc))

	@app.exception_handler(CurrencyNotSupportedError)
	async def currency_not_supported_handler(request: Request, exc: CurrencyNotSupportedError):
		return _problem(status.HTTP_400_BAD_REQUEST, 'Currency not supported', str(exc))

	@app.exception_handler(InsufficientDataError)
	async def insufficient_data_handler(request: Request, exc: InsufficientDataError):
		return _problem(status.HTTP_400_BAD_REQUEST, 'Insufficient data', str(exc))

	@app.exception_handler(RateNotAvailableError)
	async def rate_not_available_handler(request: Request, exc: RateNotAvailableError):
		return _problem(status.HTTP_503_SERVICE_UNAVAILABLE, 'Exchange rate not available', str(exc))

	@app.exception_handler(RateUnavailableError)
	async def rate_unavailable_handler(request: Request, exc: RateUnavailableError):
		logger.error(f'Rate refresh failed: {exc}')
		return _problem(
			status.HTTP_503_SERVICE_UNAVAILABLE,
			'Exchange rate unavailable',
			'Exchange rates could not be refreshed from any provider',
		)

	@app.exception_handler(ProviderError)
	async def provider_error_handler(request: Request, exc: ProviderError):
		logger.error(f'Provider error: {exc}')
		return _problem(
			status.HTTP_503_SERVICE_UNAVAILABLE,
			'Provider error',
			'Exchange rate service unavailable',
		)
