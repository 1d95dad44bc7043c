from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from domain.models.finance import AlertStatus


class RelayRatesResponse(BaseModel):
	rates: dict[str, float] = Field(..., description='RSD per one unit of each currency')
	lastUpdated: str = Field(..., description='Rate list date or time of the fallback')
	source: str = Field(..., description='Upstream provider name or "fallback"')
	error: str | None = Field(None, description='Why fallback rates were served')

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'rates': {'USD': 99.32, 'EUR': 117.16, 'RSD': 1},
				'lastUpdated': '2026-10-19',
				'source': 'kursna-lista.info',
			}
		}
	)


class ExchangeRatesResponse(BaseModel):
	base_currency: str = Field(..., description='Reporting currency, always rate 1')
	rates: dict[str, Decimal] = Field(..., description='Units of base currency per unit')
	last_updated: datetime | None = Field(None, description='When the rates were fetched')
	warning: str | None = Field(None, description='Advisory message when rates may be outdated')


class ConversionResponse(BaseModel):
	currency: str = Field(..., description='Source currency code')
	base_currency: str = Field(..., description='Reporting currency code')
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Amount in the reporting currency')
	exchange_rate: Decimal = Field(..., description='Exchange rate used for conversion')
	last_updated: datetime | None = Field(None, description='When the rate was fetched')


class FinanceSummaryResponse(BaseModel):
	base_currency: str = Field(..., description='Reporting currency code')
	income: Decimal = Field(..., description='Total income in the reporting currency')
	expense: Decimal = Field(..., description='Total expenses in the reporting currency')
	balance: Decimal = Field(..., description='Income minus expenses')
	by_currency: dict[str, Decimal] = Field(..., description='Unconverted net balance per currency')
	last_updated: datetime | None = Field(None, description='When the rates were fetched')


class BudgetAlertResponse(BaseModel):
	category: str
	spent: Decimal = Field(..., description='Spent this month, in RSD')
	budget: Decimal = Field(..., description='Budget amount, in RSD')
	percentage: Decimal
	status: AlertStatus
	title: str
	message: str


class BudgetAlertsResponse(BaseModel):
	alerts: list[BudgetAlertResponse]


class NewExpenseAlertResponse(BaseModel):
	alert: BudgetAlertResponse | None = None


class RateHistoryItem(BaseModel):
	currency: str
	rate: Decimal
	fetched_at: datetime
	source: str
	is_fallback: bool


class RateHistoryResponse(BaseModel):
	history: list[RateHistoryItem]


class HealthResponse(BaseModel):
	status: str
	components: dict[str, str]
	last_updated: datetime | None = None
