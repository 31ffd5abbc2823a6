import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, runtime_checkable

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions.currency import ProviderError
from domain.models.currency import RateSnapshot
from domain.validation.currency import is_iso4217_currency
from infrastructure.monitoring.logger import log_provider_call

logger = logging.getLogger(__name__)


@runtime_checkable
class ExchangeRateProvider(Protocol):
	"""The one capability the aggregator needs from an upstream rate source."""

	@property
	def name(self) -> str: ...

	async def fetch_latest(
		self, base: str | None = None, symbols: Sequence[str] | None = None
	) -> RateSnapshot: ...

	async def close(self) -> None: ...


class BaseHTTPProvider(ABC):
	"""A base class for HTTP rate providers, handling the common request logic.

	Transport errors are retried with exponential backoff; HTTP status errors
	and unparseable bodies are not. Every failure surfaces as ProviderError and
	the message never carries the credential.
	"""

	BASE_URL: str = ''

	def __init__(
		self,
		client: httpx.AsyncClient | None = None,
		timeout: int = 10,
		retry_attempts: int = 3,
		headers: dict[str, str] | None = None,
	):
		self.retry_attempts = max(1, retry_attempts)
		self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout), headers=headers)

	@property
	@abstractmethod
	def name(self) -> str: ...

	@abstractmethod
	async def fetch_latest(
		self, base: str | None = None, symbols: Sequence[str] | None = None
	) -> RateSnapshot: ...

	async def _request(self, endpoint: str, params: dict[str, Any]) -> dict:
		url = f'{self.BASE_URL}/{endpoint}'
		start_time = time.perf_counter()
		try:
			async for attempt in AsyncRetrying(
				stop=stop_after_attempt(self.retry_attempts),
				wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
				retry=retry_if_exception_type(httpx.TransportError),
				reraise=True,
			):
				with attempt:
					response = await self._client.get(url, params=params)
					response.raise_for_status()
			data = response.json()
		except httpx.HTTPStatusError as e:
			error = f'HTTP error {e.response.status_code}'
			log_provider_call(self.name, False, self._elapsed_ms(start_time), error)
			raise ProviderError(f'{self.name} {error}') from e
		except httpx.RequestError as e:
			error = f'request failed: {e.__class__.__name__}'
			log_provider_call(self.name, False, self._elapsed_ms(start_time), error)
			raise ProviderError(f'{self.name} {error}') from e
		except ValueError as e:
			error = 'response is not valid JSON'
			log_provider_call(self.name, False, self._elapsed_ms(start_time), error)
			raise ProviderError(f'{self.name} {error}') from e

		if not isinstance(data, dict):
			raise ProviderError(f'{self.name} response parsing error: expected a JSON object')

		log_provider_call(self.name, True, self._elapsed_ms(start_time))
		return data

	def _parse_rates(self, raw_rates: dict[str, Any]) -> dict[str, Decimal]:
		rates: dict[str, Decimal] = {}
		for code, value in raw_rates.items():
			code = str(code).upper()
			if not is_iso4217_currency(code):
				logger.debug(f'{self.name}: skipping unsupported currency {code}')
				continue
			try:
				rate = Decimal(str(value))
			except InvalidOperation as e:
				raise ProviderError(f'{self.name} returned a non-numeric rate for {code}') from e
			if not rate.is_finite():
				raise ProviderError(f'{self.name} returned a non-finite rate for {code}')
			rates[code] = rate
		return rates

	@staticmethod
	def _elapsed_ms(start_time: float) -> float:
		return (time.perf_counter() - start_time) * 1000

	async def close(self) -> None:
		"""Cleanly close the HTTP client."""
		await self._client.aclose()
