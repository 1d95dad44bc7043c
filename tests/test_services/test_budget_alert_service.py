from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

from application.services.budget_alert_service import (
    BudgetAlertService,
    budget_percentage,
    classify,
)
from application.services.exchange_rate_service import ExchangeRateService
from domain.models.finance import AlertStatus, Budget, BudgetAlert, Expense

TODAY = date(2026, 10, 19)
RATES = {"USD": Decimal("100"), "EUR": Decimal("120"), "RSD": Decimal("1")}


def food_budget(amount="1000", currency="RSD", month=10, year=2026):
    return Budget(category="Food", amount=Decimal(amount), currency=currency, month=month, year=year)


def food_expense(amount, currency="RSD", day=date(2026, 10, 5)):
    return Expense(category="Food", amount=Decimal(amount), currency=currency, date=day)


@pytest.fixture
def mock_rate_service():
    service = Mock(spec=ExchangeRateService)
    service.get_exchange_rates = AsyncMock(return_value=dict(RATES))
    return service


@pytest.fixture
def alert_service(mock_rate_service):
    return BudgetAlertService(rate_service=mock_rate_service, today=lambda: TODAY)


class TestClassification:

    @pytest.mark.parametrize(
        "percentage, expected",
        [
            (Decimal("0"), None),
            (Decimal("50"), None),
            (Decimal("74.99"), None),
            (Decimal("75"), AlertStatus.WARNING),
            (Decimal("89.99"), AlertStatus.WARNING),
            (Decimal("90"), AlertStatus.CRITICAL),
            (Decimal("99.99"), AlertStatus.CRITICAL),
            (Decimal("100"), AlertStatus.EXCEEDED),
            (Decimal("250"), AlertStatus.EXCEEDED),
        ],
    )
    def test_classify(self, percentage, expected):
        assert classify(percentage) is expected

    def test_percentage_of_zero_budget_is_zero(self):
        assert budget_percentage(Decimal("500"), Decimal("0")) == Decimal("0")

    def test_percentage(self):
        assert budget_percentage(Decimal("750"), Decimal("1000")) == Decimal("75")


class TestCheckBudgetAlerts:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "spent, expected",
        [
            ("750", AlertStatus.WARNING),
            ("900", AlertStatus.CRITICAL),
            ("1000", AlertStatus.EXCEEDED),
        ],
    )
    async def test_thresholds(self, alert_service, spent, expected):
        alerts = await alert_service.check_budget_alerts([food_budget()], [food_expense(spent)])

        assert len(alerts) == 1
        assert alerts[0].status is expected
        assert alerts[0].spent == Decimal(spent)
        assert alerts[0].budget == Decimal("1000")

    @pytest.mark.asyncio
    async def test_below_warning_emits_nothing(self, alert_service):
        alerts = await alert_service.check_budget_alerts([food_budget()], [food_expense("500")])

        assert alerts == []

    @pytest.mark.asyncio
    async def test_amounts_are_converted_to_rsd(self, alert_service):
        # Budget of 10 USD = 1000 RSD; 3 EUR + 400 RSD = 760 RSD spent.
        alerts = await alert_service.check_budget_alerts(
            [food_budget("10", "USD")],
            [food_expense("3", "EUR"), food_expense("400")],
        )

        assert alerts[0].spent == Decimal("760")
        assert alerts[0].budget == Decimal("1000")
        assert alerts[0].percentage == Decimal("76")
        assert alerts[0].status is AlertStatus.WARNING

    @pytest.mark.asyncio
    async def test_only_current_month_counts(self, alert_service):
        budgets = [food_budget(), food_budget(month=9)]
        expenses = [
            food_expense("700"),
            food_expense("5000", day=date(2026, 9, 30)),
            food_expense("5000", day=date(2025, 10, 10)),
        ]

        alerts = await alert_service.check_budget_alerts(budgets, expenses)

        assert alerts == []

    @pytest.mark.asyncio
    async def test_other_categories_do_not_count(self, alert_service):
        expenses = [
            food_expense("100"),
            Expense(category="Transport", amount=Decimal("5000"), currency="RSD", date=TODAY),
        ]

        assert await alert_service.check_budget_alerts([food_budget()], expenses) == []

    @pytest.mark.asyncio
    async def test_zero_budget_never_alerts(self, alert_service):
        alerts = await alert_service.check_budget_alerts([food_budget("0")], [food_expense("100")])

        assert alerts == []

    @pytest.mark.asyncio
    async def test_explicit_today_overrides_clock(self, alert_service):
        alerts = await alert_service.check_budget_alerts(
            [food_budget(month=9)],
            [food_expense("950", day=date(2026, 9, 12))],
            today=date(2026, 9, 30),
        )

        assert alerts[0].status is AlertStatus.CRITICAL

    @pytest.mark.asyncio
    async def test_recomputed_on_every_call(self, alert_service, mock_rate_service):
        budgets = [food_budget()]

        first = await alert_service.check_budget_alerts(budgets, [food_expense("800")])
        second = await alert_service.check_budget_alerts(budgets, [food_expense("800")])

        assert first == second
        assert mock_rate_service.get_exchange_rates.await_count == 2

    @pytest.mark.asyncio
    async def test_notifiable_alerts_skip_warnings(self, alert_service):
        budgets = [
            food_budget(),
            Budget(category="Software", amount=Decimal("1000"), currency="RSD", month=10, year=2026),
        ]
        expenses = [
            food_expense("800"),
            Expense(category="Software", amount=Decimal("950"), currency="RSD", date=TODAY),
        ]

        alerts = await alert_service.notifiable_alerts(budgets, expenses)

        assert [a.category for a in alerts] == ["Software"]
        assert alerts[0].status is AlertStatus.CRITICAL


class TestNewExpenseAlert:

    @pytest.mark.asyncio
    async def test_crossing_warning(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget()], [food_expense("700")], food_expense("100", day=TODAY)
        )

        assert alert.status is AlertStatus.WARNING
        assert alert.spent == Decimal("800")
        assert alert.percentage == Decimal("80")

    @pytest.mark.asyncio
    async def test_already_above_threshold_does_not_repeat(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget()], [food_expense("800")], food_expense("50", day=TODAY)
        )

        assert alert is None

    @pytest.mark.asyncio
    async def test_reports_highest_threshold_crossed(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget()], [food_expense("100")], food_expense("10", "USD", day=TODAY)
        )

        assert alert.status is AlertStatus.EXCEEDED
        assert alert.spent == Decimal("1100")

    @pytest.mark.asyncio
    async def test_warning_to_critical(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget()], [food_expense("800")], food_expense("120", day=TODAY)
        )

        assert alert.status is AlertStatus.CRITICAL

    @pytest.mark.asyncio
    async def test_no_budget_for_category(self, alert_service):
        expense = Expense(category="Holiday", amount=Decimal("99999"), currency="RSD", date=TODAY)

        assert await alert_service.check_new_expense_alert([food_budget()], [], expense) is None

    @pytest.mark.asyncio
    async def test_expense_outside_current_month(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget()], [], food_expense("5000", day=date(2026, 9, 1))
        )

        assert alert is None

    @pytest.mark.asyncio
    async def test_zero_budget(self, alert_service):
        alert = await alert_service.check_new_expense_alert(
            [food_budget("0")], [], food_expense("5000", day=TODAY)
        )

        assert alert is None


class TestDescribeAlert:

    def test_exceeded_message(self):
        alert = BudgetAlert(
            category="Food",
            spent=Decimal("1200"),
            budget=Decimal("1000"),
            percentage=Decimal("120"),
            status=AlertStatus.EXCEEDED,
        )

        title, message = BudgetAlertService.describe_alert(alert)

        assert title == "Budget Exceeded!"
        assert message == "Food: 1,200.00 RSD spent (120% of budget). Over by 200.00 RSD."

    def test_critical_message(self):
        alert = BudgetAlert(
            category="Food",
            spent=Decimal("925"),
            budget=Decimal("1000"),
            percentage=Decimal("92.5"),
            status=AlertStatus.CRITICAL,
        )

        title, message = BudgetAlertService.describe_alert(alert)

        assert title == "Budget Alert - Critical"
        assert message == "Food: 92% of budget used. Only 75.00 RSD remaining."

    def test_warning_message(self):
        alert = BudgetAlert(
            category="Food",
            spent=Decimal("750"),
            budget=Decimal("1000"),
            percentage=Decimal("75"),
            status=AlertStatus.WARNING,
        )

        title, message = BudgetAlertService.describe_alert(alert)

        assert title == "Budget Alert - Warning"
        assert message == "Food: 75% of budget used. 250.00 RSD remaining."
