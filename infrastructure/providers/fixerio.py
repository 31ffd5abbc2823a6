import logging
from collections.abc import Sequence
from datetime import date

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import RateSnapshot
from infrastructure.providers.base import BaseHTTPProvider

logger = logging.getLogger(__name__)


class FixerIOProvider(BaseHTTPProvider):
	BASE_URL = 'http://data.fixer.io/api'

	def __init__(
		self,
		api_key: str,
		client: httpx.AsyncClient | None = None,
		timeout: int = 10,
		retry_attempts: int = 3,
	):
		super().__init__(client=client, timeout=timeout, retry_attempts=retry_attempts)
		self.api_key = api_key

	@property
	def name(self) -> str:
		return 'fixerio'

	async def fetch_latest(
		self, base: str | None = None, symbols: Sequence[str] | None = None
	) -> RateSnapshot:
		params = {'access_key': self.api_key}
		if base:
			params['base'] = base
		if symbols:
			params['symbols'] = ','.join(symbols)

		data = await self._request('latest', params)

		if not data.get('success', False):
			info = (data.get('error') or {}).get('info', 'Unknown error')
			logger.warning(f'Fixer.io API error: {info}')
			return RateSnapshot.failure(self.name)

		if not data.get('rates') or not data.get('base'):
			logger.warning('Fixer.io returned a response without rates')
			return RateSnapshot.failure(self.name)

		try:
			as_of = date.fromisoformat(data['date']) if data.get('date') else None
		except ValueError as e:
			raise ProviderError(f'Fixer.io response parsing error: bad date {data["date"]!r}') from e

		return RateSnapshot(
			base_currency=str(data['base']).upper(),
			as_of_date=as_of,
			rates=self._parse_rates(data['rates']),
			success=True,
			provider_name=self.name,
		)
