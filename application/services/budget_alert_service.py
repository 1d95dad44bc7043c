import logging
from collections.abc import Callable, Iterable
from datetime import date
from decimal import Decimal

from application.services.conversion_service import ConversionService
from application.services.exchange_rate_service import ExchangeRateService
from domain.models.currency import ExchangeRateMap
from domain.models.finance import AlertStatus, Budget, BudgetAlert, Expense

logger = logging.getLogger(__name__)

WARNING_THRESHOLD = Decimal("75")
CRITICAL_THRESHOLD = Decimal("90")
EXCEEDED_THRESHOLD = Decimal("100")

# Highest first, so the first match is the most severe status.
THRESHOLDS = (
    (EXCEEDED_THRESHOLD, AlertStatus.EXCEEDED),
    (CRITICAL_THRESHOLD, AlertStatus.CRITICAL),
    (WARNING_THRESHOLD, AlertStatus.WARNING),
)

NOTIFIABLE_STATUSES = frozenset({AlertStatus.EXCEEDED, AlertStatus.CRITICAL})


def budget_percentage(spent: Decimal, budget: Decimal) -> Decimal:
    if budget <= 0:
        return Decimal("0")
    return spent / budget * 100


def classify(percentage: Decimal) -> AlertStatus | None:
    for threshold, status in THRESHOLDS:
        if percentage >= threshold:
            return status
    return None


def _in_month(day: date, today: date) -> bool:
    return day.month == today.month and day.year == today.year


class BudgetAlertService:
    """
    Compares this month's spending against budgets, everything in RSD.

    Alerts are recomputed from scratch on every call. Deciding which ones
    were already shown to the user is up to the caller.
    """

    def __init__(
        self,
        rate_service: ExchangeRateService,
        today: Callable[[], date] = date.today,
    ):
        self.rate_service = rate_service
        self.today = today

    async def check_budget_alerts(
        self, budgets: Iterable[Budget], expenses: Iterable[Expense], today: date | None = None
    ) -> list[BudgetAlert]:
        rates = await self.rate_service.get_exchange_rates()
        return self.evaluate(budgets, expenses, rates, today or self.today())

    async def notifiable_alerts(
        self, budgets: Iterable[Budget], expenses: Iterable[Expense], today: date | None = None
    ) -> list[BudgetAlert]:
        alerts = await self.check_budget_alerts(budgets, expenses, today)
        return [alert for alert in alerts if alert.status in NOTIFIABLE_STATUSES]

    async def check_new_expense_alert(
        self,
        budgets: Iterable[Budget],
        expenses: Iterable[Expense],
        new_expense: Expense,
        today: date | None = None,
    ) -> BudgetAlert | None:
        rates = await self.rate_service.get_exchange_rates()
        return self.evaluate_new_expense(budgets, expenses, new_expense, rates, today or self.today())

    def evaluate(
        self,
        budgets: Iterable[Budget],
        expenses: Iterable[Expense],
        rates: ExchangeRateMap,
        today: date,
    ) -> list[BudgetAlert]:
        expenses = list(expenses)
        alerts = []

        for budget in budgets:
            if budget.month != today.month or budget.year != today.year:
                continue

            spent = self._spent_this_month(budget.category, expenses, rates, today)
            budget_amount = ConversionService.convert_to_base(budget.amount, budget.currency, rates)
            percentage = budget_percentage(spent, budget_amount)

            status = classify(percentage)
            if status is None:
                continue

            alerts.append(
                BudgetAlert(
                    category=budget.category,
                    spent=spent,
                    budget=budget_amount,
                    percentage=percentage,
                    status=status,
                )
            )

        return alerts

    def evaluate_new_expense(
        self,
        budgets: Iterable[Budget],
        expenses: Iterable[Expense],
        new_expense: Expense,
        rates: ExchangeRateMap,
        today: date,
    ) -> BudgetAlert | None:
        """
        Return the alert for the highest threshold this one expense crosses.

        ``expenses`` is the list before ``new_expense`` was added.
        """
        if not _in_month(new_expense.date, today):
            return None

        budget = next(
            (
                b
                for b in budgets
                if b.category == new_expense.category and b.month == today.month and b.year == today.year
            ),
            None,
        )
        if budget is None:
            return None

        current_spent = self._spent_this_month(new_expense.category, expenses, rates, today)
        new_spent = current_spent + ConversionService.convert_to_base(
            new_expense.amount, new_expense.currency, rates
        )
        budget_amount = ConversionService.convert_to_base(budget.amount, budget.currency, rates)

        current_percentage = budget_percentage(current_spent, budget_amount)
        new_percentage = budget_percentage(new_spent, budget_amount)

        for threshold, status in THRESHOLDS:
            if new_percentage >= threshold and current_percentage < threshold:
                logger.info(
                    f"Expense in {new_expense.category} crossed {threshold}% of budget "
                    f"({current_percentage:.1f}% -> {new_percentage:.1f}%)"
                )
                return BudgetAlert(
                    category=new_expense.category,
                    spent=new_spent,
                    budget=budget_amount,
                    percentage=new_percentage,
                    status=status,
                )
        return None

    @staticmethod
    def describe_alert(alert: BudgetAlert) -> tuple[str, str]:
        """Notification title and message for an alert."""
        percentage = round(alert.percentage)
        remaining = alert.remaining

        if alert.status is AlertStatus.EXCEEDED:
            return (
                "Budget Exceeded!",
                f"{alert.category}: {alert.spent:,.2f} RSD spent ({percentage}% of budget). "
                f"Over by {abs(remaining):,.2f} RSD.",
            )
        if alert.status is AlertStatus.CRITICAL:
            return (
                "Budget Alert - Critical",
                f"{alert.category}: {percentage}% of budget used. Only {remaining:,.2f} RSD remaining.",
            )
        return (
            "Budget Alert - Warning",
            f"{alert.category}: {percentage}% of budget used. {remaining:,.2f} RSD remaining.",
        )

    def _spent_this_month(
        self, category: str, expenses: Iterable[Expense], rates: ExchangeRateMap, today: date
    ) -> Decimal:
        return ConversionService.total_in_base(
            (e for e in expenses if e.category == category and _in_month(e.date, today)),
            rates,
        )
