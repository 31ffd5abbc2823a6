import logging

from redis.exceptions import RedisError

from domain.exceptions.currency import CacheError, CurrencyNotSupportedError
from domain.validation.currency import parse_currency_code
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.repositories.currency import SupportedCurrencyRepository

logger = logging.getLogger(__name__)


class CurrencyService:
	"""Registry of currencies the deployment tracks.

	An empty registry means "no restriction": every ISO 4217 code is accepted.
	"""

	def __init__(self, repository: SupportedCurrencyRepository, cache: RedisCacheService | None = None):
		self.repository = repository
		self.cache = cache

	async def get_supported_currencies(self) -> list[str]:
		cached = await self._read_cache()
		if cached is not None:
			return cached

		codes = sorted(await self.repository.list_codes())
		if codes:
			await self._write_cache(codes)
		logger.info(f'Returning {len(codes)} supported currencies')
		return codes

	async def add_currency(self, code: str) -> bool:
		normalized = parse_currency_code(code)

		if await self.repository.exists(normalized):
			logger.info(f'Currency {normalized} already exists')
			return False

		await self.repository.add(normalized)
		await self._invalidate_cache()
		logger.info(f'Currency {normalized} added successfully')
		return True

	async def validate_supported(self, *codes: str) -> None:
		supported = await self.get_supported_currencies()
		if not supported:
			return

		for code in codes:
			normalized = parse_currency_code(code)
			if normalized not in supported:
				raise CurrencyNotSupportedError(normalized, supported)

	async def _read_cache(self) -> list[str] | None:
		if self.cache is None:
			return None
		try:
			return await self.cache.get_supported_currencies()
		except (CacheError, RedisError) as e:
			logger.warning(f'Supported currency cache unavailable, using database: {e}')
			return None

	async def _write_cache(self, codes: list[str]) -> None:
		if self.cache is None:
			return
		try:
			await self.cache.set_supported_currencies(codes)
		except RedisError as e:
			logger.warning(f'Failed to cache supported currencies: {e}')

	async def _invalidate_cache(self) -> None:
		if self.cache is None:
			return
		try:
			await self.cache.invalidate_supported_currencies()
		except RedisError as e:
			logger.warning(f'Failed to invalidate supported currency cache: {e}')
