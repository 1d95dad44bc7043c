from collections.abc import Iterable
from decimal import Decimal

from application.services.exchange_rate_service import ExchangeRateService
from domain.exceptions.currency import InvalidCurrencyError
from domain.models.currency import BASE_CURRENCY, ExchangeRateMap
from domain.models.finance import Expense, Income


def to_decimal(value) -> Decimal:
	return value if isinstance(value, Decimal) else Decimal(str(value))


class ConversionService:
	def __init__(self, rate_service: ExchangeRateService):
		self.rate_service = rate_service

	async def convert(self, amount: Decimal, currency: str) -> dict:
		rates = await self.rate_service.get_exchange_rates()
		currency = currency.upper()
		converted_amount = self.convert_to_base(amount, currency, rates)

		return {
			'currency': currency,
			'base_currency': BASE_CURRENCY,
			'original_amount': amount,
			'converted_amount': converted_amount,
			'exchange_rate': rates[currency],
			'last_updated': self.rate_service.get_last_updated(),
		}

	async def summarize(self, incomes: list[Income], expenses: list[Expense]) -> dict:
		rates = await self.rate_service.get_exchange_rates()
		totals = self.totals_in_base(incomes, expenses, rates)

		return {
			'base_currency': BASE_CURRENCY,
			**totals,
			'by_currency': self.balance_by_currency(incomes, expenses),
			'last_updated': self.rate_service.get_last_updated(),
		}

	@staticmethod
	def convert_to_base(amount: Decimal, currency: str, rates: ExchangeRateMap) -> Decimal:
		rate = rates.get(currency.upper())
		if rate is None:
			raise InvalidCurrencyError(f'Currency {currency} is not supported')
		return to_decimal(amount) * rate

	@classmethod
	def total_in_base(cls, items: Iterable[Income | Expense], rates: ExchangeRateMap) -> Decimal:
		return sum(
			(cls.convert_to_base(item.amount, item.currency, rates) for item in items),
			Decimal('0'),
		)

	@staticmethod
	def balance_by_currency(incomes: Iterable[Income], expenses: Iterable[Expense]) -> dict[str, Decimal]:
		"""Net balance per original currency, with no conversion."""
		balances: dict[str, Decimal] = {}
		for income in incomes:
			code = income.currency.upper()
			balances[code] = balances.get(code, Decimal('0')) + to_decimal(income.amount)
		for expense in expenses:
			code = expense.currency.upper()
			balances[code] = balances.get(code, Decimal('0')) - to_decimal(expense.amount)
		return balances

	@classmethod
	def totals_in_base(
		cls, incomes: Iterable[Income], expenses: Iterable[Expense], rates: ExchangeRateMap
	) -> dict[str, Decimal]:
		income = cls.total_in_base(incomes, rates)
		expense = cls.total_in_base(expenses, rates)
		return {'income': income, 'expense': expense, 'balance': income - expense}
