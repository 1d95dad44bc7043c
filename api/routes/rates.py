from datetime import datetime
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import get_conversion_service, get_rate_history_repository, get_rate_service
from api.schemas import (
	ConversionResponse,
	ExchangeRatesResponse,
	FinanceSummaryRequest,
	FinanceSummaryResponse,
	RateHistoryItem,
	RateHistoryResponse,
)
from application.services import ConversionService, ExchangeRateService
from domain.models.currency import BASE_CURRENCY
from infrastructure.persistence.repositories.currency import RateHistoryRepository

router = APIRouter(prefix='/api', tags=['rates'])


@router.get(
	'/rates',
	response_model=ExchangeRatesResponse,
	status_code=status.HTTP_200_OK,
	summary='Get current exchange rates',
)
async def get_rates(
	service: Annotated[ExchangeRateService, Depends(get_rate_service)],
	force_refresh: Annotated[bool, Query()] = False,
) -> ExchangeRatesResponse:
	rates = await service.get_exchange_rates(force_refresh=force_refresh)
	return ExchangeRatesResponse(
		base_currency=BASE_CURRENCY,
		rates=rates,
		last_updated=service.get_last_updated(),
		warning=service.last_error,
	)


@router.delete(
	'/rates/cache',
	status_code=status.HTTP_204_NO_CONTENT,
	summary='Drop cached rates so the next read goes to the network',
)
async def clear_rate_cache(
	service: Annotated[ExchangeRateService, Depends(get_rate_service)],
) -> None:
	await service.clear_cache()


@router.get(
	'/rates/history',
	response_model=RateHistoryResponse,
	status_code=status.HTTP_200_OK,
	summary='Recently fetched rates',
)
async def get_rate_history(
	repository: Annotated[RateHistoryRepository, Depends(get_rate_history_repository)],
	currency: Annotated[str | None, Query(min_length=3, max_length=5)] = None,
	since: Annotated[datetime | None, Query(description='Only rates fetched at or after this time')] = None,
	limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> RateHistoryResponse:
	rows = await repository.get_history(
		currency=currency.upper() if currency else None, since=since, limit=limit
	)
	return RateHistoryResponse(
		history=[
			RateHistoryItem(
				currency=row.currency,
				rate=row.rate,
				fetched_at=row.fetched_at,
				source=row.source,
				is_fallback=row.is_fallback,
			)
			for row in rows
		]
	)


@router.get(
	'/convert/{currency}/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert an amount to the reporting currency',
)
async def convert_to_base(
	currency: Annotated[
		str,
		Path(
			min_length=3,
			max_length=5,
		),
	],
	amount: Annotated[
		Decimal,
		Path(
			ge=0,
		),
	],
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> ConversionResponse:
	result = await service.convert(amount, currency)
	return ConversionResponse(**result)


@router.post(
	'/summary',
	response_model=FinanceSummaryResponse,
	status_code=status.HTTP_200_OK,
	summary='Total income, expenses and balance in the reporting currency',
)
async def summarize_finances(
	request: FinanceSummaryRequest,
	service: Annotated[ConversionService, Depends(get_conversion_service)],
) -> FinanceSummaryResponse:
	result = await service.summarize(
		[i.to_domain() for i in request.incomes],
		[e.to_domain() for e in request.expenses],
	)
	return FinanceSummaryResponse(**result)
