from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_relay_service
from api.schemas import RelayRatesResponse
from application.services import RelayService

router = APIRouter(prefix='/functions/v1', tags=['relay'])


@router.get(
	'/get-exchange-rates',
	response_model=RelayRatesResponse,
	response_model_exclude_none=True,
	status_code=status.HTTP_200_OK,
	summary='Current RSD exchange rates, with fallback on upstream failure',
)
async def get_exchange_rates(
	service: Annotated[RelayService, Depends(get_relay_service)],
) -> RelayRatesResponse:
	result = await service.get_rates()
	return RelayRatesResponse(
		rates={code: float(rate) for code, rate in result.rates.items()},
		lastUpdated=result.last_updated,
		source=result.source,
		error=result.error,
	)
