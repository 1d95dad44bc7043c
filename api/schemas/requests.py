from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.models.finance import Budget, Expense, Income


class BudgetSchema(BaseModel):
	category: str = Field(..., min_length=1)
	amount: Decimal = Field(..., ge=0)
	currency: str = Field(..., min_length=3, max_length=5)
	month: int = Field(..., ge=1, le=12)
	year: int = Field(..., ge=1970)

	@field_validator('currency')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()

	def to_domain(self) -> Budget:
		return Budget(
			category=self.category,
			amount=self.amount,
			currency=self.currency,
			month=self.month,
			year=self.year,
		)


class ExpenseSchema(BaseModel):
	category: str = Field(..., min_length=1)
	amount: Decimal = Field(..., ge=0)
	currency: str = Field(..., min_length=3, max_length=5)
	date: date
	description: str = ''

	@field_validator('currency')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()

	def to_domain(self) -> Expense:
		return Expense(
			category=self.category,
			amount=self.amount,
			currency=self.currency,
			date=self.date,
			description=self.description,
		)


class IncomeSchema(BaseModel):
	amount: Decimal = Field(..., ge=0)
	currency: str = Field(..., min_length=3, max_length=5)
	date: date
	client: str = ''

	@field_validator('currency')
	@classmethod
	def uppercase_currency(cls, v: str):
		return v.upper()

	def to_domain(self) -> Income:
		return Income(
			amount=self.amount,
			currency=self.currency,
			date=self.date,
			client=self.client,
		)


class FinanceSummaryRequest(BaseModel):
	incomes: list[IncomeSchema] = Field(default_factory=list)
	expenses: list[ExpenseSchema] = Field(default_factory=list)


class BudgetAlertsRequest(BaseModel):
	budgets: list[BudgetSchema] = Field(default_factory=list)
	expenses: list[ExpenseSchema] = Field(default_factory=list)
	today: date | None = Field(None, description='Defaults to the current date')
	notifiable_only: bool = Field(False, description='Only exceeded and critical alerts')


class NewExpenseAlertRequest(BaseModel):
	budgets: list[BudgetSchema] = Field(default_factory=list)
	expenses: list[ExpenseSchema] = Field(
		default_factory=list, description='Expenses recorded before the new one'
	)
	new_expense: ExpenseSchema
	today: date | None = None

	model_config = ConfigDict(
		json_schema_extra={
			'example': {
				'budgets': [
					{'category': 'Food', 'amount': 1000, 'currency': 'RSD', 'month': 10, 'year': 2026}
				],
				'expenses': [
					{'category': 'Food', 'amount': 700, 'currency': 'RSD', 'date': '2026-10-02'}
				],
				'new_expense': {'category': 'Food', 'amount': 100, 'currency': 'RSD', 'date': '2026-10-19'},
			}
		}
	)
