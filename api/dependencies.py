import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from application.services import (
	ConversionService,
	CurrencyService,
	MaintenanceService,
	ProviderAggregator,
	RateService,
	TrendsService,
)
from config.settings import Settings, get_settings
from infrastructure.cache.memory_cache import RateCache
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.currency import (
	RateSampleRepository,
	SupportedCurrencyRepository,
)
from infrastructure.providers import (
	CurrencyAPIProvider,
	ExchangeRateProvider,
	FixerIOProvider,
	OpenExchangeProvider,
)

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	redis_cache: RedisCacheService | None = None
	providers: list[ExchangeRateProvider] | None = None
	aggregator: ProviderAggregator | None = None
	rate_cache: RateCache | None = None


deps = AppDependencies()


def build_providers(settings: Settings) -> list[ExchangeRateProvider]:
	"""Providers in configured order; a provider without credentials is skipped."""
	factories = {
		'fixerio': lambda: FixerIOProvider(
			settings.FIXERIO_API_KEY,
			timeout=settings.PROVIDER_TIMEOUT_SECONDS,
			retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS,
		),
		'openexchange': lambda: OpenExchangeProvider(
			settings.OPENEXCHANGE_APP_ID,
			timeout=settings.PROVIDER_TIMEOUT_SECONDS,
			retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS,
		),
		'currencyapi': lambda: CurrencyAPIProvider(
			settings.CURRENCYAPI_API_KEY,
			timeout=settings.PROVIDER_TIMEOUT_SECONDS,
			retry_attempts=settings.PROVIDER_RETRY_ATTEMPTS,
		),
	}
	credentials = {
		'fixerio': settings.FIXERIO_API_KEY,
		'openexchange': settings.OPENEXCHANGE_APP_ID,
		'currencyapi': settings.CURRENCYAPI_API_KEY,
	}

	providers: list[ExchangeRateProvider] = []
	for name in settings.provider_order:
		if name not in factories:
			logger.warning(f'Unknown provider {name!r} in PROVIDER_ORDER, ignoring')
			continue
		if not credentials[name]:
			logger.warning(f'No credentials configured for provider {name}, skipping')
			continue
		providers.append(factories[name]())
	return providers


def init_dependencies(settings: Settings | None = None) -> AppDependencies:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = settings or get_settings()

	deps.db = Database(settings.DATABASE_URL)
	deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
	deps.redis_cache = RedisCacheService(deps.redis_client)
	deps.providers = build_providers(settings)
	deps.aggregator = ProviderAggregator(deps.providers)
	deps.rate_cache = RateCache(ttl=settings.cache_ttl)

	logger.info(f'Dependencies initialized with providers: {deps.aggregator.provider_names}')
	return deps


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.db:
		await deps.db.close()
	if deps.providers:
		for provider in deps.providers:
			await provider.close()

	logger.info('Cleanup complete')


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')

	async with deps.db.session() as session:
		yield session


def get_redis_cache() -> RedisCacheService:
	if deps.redis_cache is None:
		raise RuntimeError('Redis cache not initialized')
	return deps.redis_cache


def get_rate_cache() -> RateCache:
	if deps.rate_cache is None:
		raise RuntimeError('Rate cache not initialized')
	return deps.rate_cache


def get_aggregator() -> ProviderAggregator:
	if deps.aggregator is None:
		raise RuntimeError('Providers not initialized')
	return deps.aggregator


def get_database() -> Database:
	if deps.db is None:
		raise RuntimeError('Database is not initialized')
	return deps.db


async def get_sample_repository(
	session: Annotated[AsyncSession, Depends(get_db_session)],
) -> RateSampleRepository:
	return RateSampleRepository(session)


async def get_currency_service(
	session: Annotated[AsyncSession, Depends(get_db_session)],
	cache: Annotated[RedisCacheService, Depends(get_redis_cache)],
) -> CurrencyService:
	return CurrencyService(repository=SupportedCurrencyRepository(session), cache=cache)


async def get_rate_service(
	aggregator: Annotated[ProviderAggregator, Depends(get_aggregator)],
	rate_cache: Annotated[RateCache, Depends(get_rate_cache)],
	sample_repository: Annotated[RateSampleRepository, Depends(get_sample_repository)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> RateService:
	return RateService(
		aggregator=aggregator,
		cache=rate_cache,
		sample_repository=sample_repository,
		currency_service=currency_service,
	)


async def get_conversion_service(
	rate_service: Annotated[RateService, Depends(get_rate_service)],
	currency_service: Annotated[CurrencyService, Depends(get_currency_service)],
) -> ConversionService:
	return ConversionService(rate_service=rate_service, currency_service=currency_service)


async def get_trends_service(
	sample_repository: Annotated[RateSampleRepository, Depends(get_sample_repository)],
) -> TrendsService:
	return TrendsService(repository=sample_repository)


async def get_maintenance_service(
	rate_service: Annotated[RateService, Depends(get_rate_service)],
	sample_repository: Annotated[RateSampleRepository, Depends(get_sample_repository)],
) -> MaintenanceService:
	return MaintenanceService(
		rate_service=rate_service,
		sample_repository=sample_repository,
		retention=get_settings().retention,
	)
