from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class AlertStatus(str, Enum):
    WARNING = "warning"
    CRITICAL = "critical"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class Budget:
    category: str
    amount: Decimal
    currency: str
    month: int  # 1-12
    year: int


@dataclass(frozen=True)
class Expense:
    category: str
    amount: Decimal
    currency: str
    date: date
    description: str = ""


@dataclass(frozen=True)
class Income:
    amount: Decimal
    currency: str
    date: date
    client: str = ""


@dataclass(frozen=True)
class BudgetAlert:
    category: str
    spent: Decimal  # RSD
    budget: Decimal  # RSD
    percentage: Decimal
    status: AlertStatus

    @property
    def remaining(self) -> Decimal:
        return self.budget - self.spent
