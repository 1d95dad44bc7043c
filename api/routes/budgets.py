from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import get_budget_alert_service
from api.schemas import (
	BudgetAlertResponse,
	BudgetAlertsRequest,
	BudgetAlertsResponse,
	NewExpenseAlertRequest,
	NewExpenseAlertResponse,
)
from application.services import BudgetAlertService
from domain.models.finance import BudgetAlert

router = APIRouter(prefix='/api/budgets', tags=['budgets'])


def _to_response(alert: BudgetAlert) -> BudgetAlertResponse:
	title, message = BudgetAlertService.describe_alert(alert)
	return BudgetAlertResponse(
		category=alert.category,
		spent=alert.spent,
		budget=alert.budget,
		percentage=alert.percentage,
		status=alert.status,
		title=title,
		message=message,
	)


@router.post(
	'/alerts',
	response_model=BudgetAlertsResponse,
	status_code=status.HTTP_200_OK,
	summary="Evaluate this month's budgets against spending",
)
async def check_budget_alerts(
	request: BudgetAlertsRequest,
	service: Annotated[BudgetAlertService, Depends(get_budget_alert_service)],
) -> BudgetAlertsResponse:
	budgets = [b.to_domain() for b in request.budgets]
	expenses = [e.to_domain() for e in request.expenses]

	if request.notifiable_only:
		alerts = await service.notifiable_alerts(budgets, expenses, request.today)
	else:
		alerts = await service.check_budget_alerts(budgets, expenses, request.today)

	return BudgetAlertsResponse(alerts=[_to_response(a) for a in alerts])


@router.post(
	'/alerts/new-expense',
	response_model=NewExpenseAlertResponse,
	status_code=status.HTTP_200_OK,
	summary='Check whether one new expense crosses a budget threshold',
)
async def check_new_expense_alert(
	request: NewExpenseAlertRequest,
	service: Annotated[BudgetAlertService, Depends(get_budget_alert_service)],
) -> NewExpenseAlertResponse:
	alert = await service.check_new_expense_alert(
		[b.to_domain() for b in request.budgets],
		[e.to_domain() for e in request.expenses],
		request.new_expense.to_domain(),
		request.today,
	)
	return NewExpenseAlertResponse(alert=_to_response(alert) if alert else None)
