import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends

from api.dependencies import get_aggregator, get_database, get_rate_cache, get_redis_cache
from api.schemas import HealthResponse, ProviderHealth
from application.services import ProviderAggregator
from infrastructure.cache.memory_cache import RateCache
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api/v1', tags=['health'])


@router.get(
	'/health',
	response_model=HealthResponse,
	summary='System health check',
)
async def health_check(
	aggregator: Annotated[ProviderAggregator, Depends(get_aggregator)],
	rate_cache: Annotated[RateCache, Depends(get_rate_cache)],
	database: Annotated[Database, Depends(get_database)],
	redis_cache: Annotated[RedisCacheService, Depends(get_redis_cache)],
) -> HealthResponse:
	try:
		await database.ping()
		database_status = 'healthy'
	except Exception as e:
		logger.error(f'Database health check failed: {e}')
		database_status = 'unhealthy'

	try:
		await redis_cache.ping()
		cache_status = 'healthy'
	except Exception as e:
		logger.error(f'Cache health check failed: {e}')
		cache_status = 'unhealthy'

	providers = [
		ProviderHealth(
			name=s.name,
			healthy=s.healthy,
			consecutive_failures=s.consecutive_failures,
			total_failures=s.total_failures,
			total_successes=s.total_successes,
			last_error=s.last_error,
			last_success_at=s.last_success_at,
			last_failure_at=s.last_failure_at,
		)
		for s in aggregator.provider_statuses()
	]

	if database_status == 'unhealthy' or not providers or not any(p.healthy for p in providers):
		overall = 'unhealthy'
	elif cache_status == 'unhealthy' or not all(p.healthy for p in providers):
		overall = 'degraded'
	else:
		overall = 'healthy'

	return HealthResponse(
		status=overall,
		timestamp=datetime.now(),
		database=database_status,
		cache=cache_status,
		cached_rates=len(rate_cache),
		providers=providers,
	)
