import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from api.dependencies import get_database, get_rate_service, get_redis_client
from api.schemas import HealthResponse
from application.services import ExchangeRateService
from infrastructure.persistence.database import Database

logger = logging.getLogger(__name__)

router = APIRouter(tags=['health'])


@router.get('/health', response_model=HealthResponse)
async def health_check(
	db: Annotated[Database, Depends(get_database)],
	redis_client: Annotated[Redis, Depends(get_redis_client)],
	rate_service: Annotated[ExchangeRateService, Depends(get_rate_service)],
):
	components = {}

	try:
		await db.ping()
		components['database'] = 'healthy'
	except Exception as e:
		logger.error(f'Database health check failed: {e}')
		components['database'] = 'unhealthy'

	try:
		await redis_client.ping()
		components['redis'] = 'healthy'
	except Exception as e:
		logger.error(f'Redis health check failed: {e}')
		components['redis'] = 'unhealthy'

	# Redis only mirrors the rate cache, so losing it degrades rather than breaks.
	if components['database'] == 'unhealthy':
		overall = 'unhealthy'
	elif components['redis'] == 'unhealthy':
		overall = 'degraded'
	else:
		overall = 'healthy'

	body = HealthResponse(
		status=overall,
		components=components,
		last_updated=rate_service.get_last_updated(),
	)
	return JSONResponse(
		status_code=503 if overall == 'unhealthy' else 200,
		content=body.model_dump(mode='json'),
	)
