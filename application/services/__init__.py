from .budget_alert_service import BudgetAlertService
from .conversion_service import ConversionService
from .exchange_rate_service import ExchangeRateService
from .relay_service import RelayService

__all__ = ['BudgetAlertService', 'ConversionService', 'ExchangeRateService', 'RelayService']
