import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.currency import (
	CurrencyException,
	InvalidCurrencyError,
	ProviderError,
	RateValidationError,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES: dict[type[CurrencyException], tuple[int, str | None]] = {
	InvalidCurrencyError: (400, None),
	RateValidationError: (502, 'Exchange rate source returned invalid rates'),
	ProviderError: (503, 'Exchange rate service unavailable'),
}


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(CurrencyException)
	async def currency_error_handler(request: Request, exc: CurrencyException):
		status_code, detail = 500, 'Internal server error'
		for exc_type, (code, message) in ERROR_RESPONSES.items():
			if isinstance(exc, exc_type):
				status_code, detail = code, message or str(exc)
				break

		if status_code >= 500:
			logger.error(f'{exc.__class__.__name__} on {request.url.path}: {exc}')
		return JSONResponse(status_code=status_code, content={'detail': detail})

	@app.exception_handler(Exception)
	async def global_exception_handler(request: Request, exc: Exception):
		logger.error(f'Unhandled exception: {exc}', exc_info=True)
		return JSONResponse(status_code=500, content={'detail': 'Internal server error'})
