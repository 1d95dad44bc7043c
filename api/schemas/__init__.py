from .requests import (
	BudgetAlertsRequest,
	BudgetSchema,
	ExpenseSchema,
	FinanceSummaryRequest,
	IncomeSchema,
	NewExpenseAlertRequest,
)
from .responses import (
	BudgetAlertResponse,
	BudgetAlertsResponse,
	ConversionResponse,
	ExchangeRatesResponse,
	FinanceSummaryResponse,
	HealthResponse,
	NewExpenseAlertResponse,
	RateHistoryItem,
	RateHistoryResponse,
	RelayRatesResponse,
)

__all__ = [
	'BudgetAlertResponse',
	'BudgetAlertsRequest',
	'BudgetAlertsResponse',
	'BudgetSchema',
	'ConversionResponse',
	'ExchangeRatesResponse',
	'ExpenseSchema',
	'FinanceSummaryRequest',
	'FinanceSummaryResponse',
	'HealthResponse',
	'IncomeSchema',
	'NewExpenseAlertRequest',
	'NewExpenseAlertResponse',
	'RateHistoryItem',
	'RateHistoryResponse',
	'RelayRatesResponse',
]
