import json
from datetime import timedelta

from redis import asyncio as redis

from domain.exceptions.currency import CacheError

SUPPORTED_CURRENCIES_KEY = 'currencies:supported'


class RedisCacheService:
	"""Shared cache for the supported-currency registry.

	Rates are not kept here: the rate cache lives in process memory
	(see ``infrastructure.cache.memory_cache.RateCache``).
	"""

	def __init__(self, redis_client: redis.Redis, currency_ttl: timedelta = timedelta(hours=24)):
		self.redis = redis_client
		self.currency_ttl = currency_ttl

	async def get_supported_currencies(self) -> list[str] | None:
		data = await self.redis.get(SUPPORTED_CURRENCIES_KEY)
		if not data:
			return None
		try:
			codes = json.loads(data)
		except json.JSONDecodeError as e:
			raise CacheError(f'Invalid json data under {SUPPORTED_CURRENCIES_KEY}') from e
		if not isinstance(codes, list):
			raise CacheError(f'Expected a list under {SUPPORTED_CURRENCIES_KEY}')
		return codes

	async def set_supported_currencies(self, currencies: list[str]) -> None:
		await self.redis.setex(SUPPORTED_CURRENCIES_KEY, self.currency_ttl, json.dumps(currencies))

	async def invalidate_supported_currencies(self) -> None:
		await self.redis.delete(SUPPORTED_CURRENCIES_KEY)

	async def ping(self) -> bool:
		return bool(await self.redis.ping())
