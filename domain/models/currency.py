from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType

from domain.exceptions.currency import RateValidationError

BASE_CURRENCY = "RSD"
DEFAULT_FOREIGN_CURRENCIES = ("USD", "EUR")

# Units of RSD per one unit of foreign currency.
ExchangeRateMap = dict[str, Decimal]

FALLBACK_RATES: Mapping[str, Decimal] = MappingProxyType(
    {
        "USD": Decimal("99.32"),
        "EUR": Decimal("117.16"),
        BASE_CURRENCY: Decimal("1"),
    }
)

# Used by the relay when the upstream list lacks a requested code.
MISSING_CURRENCY_DEFAULTS: Mapping[str, Decimal] = MappingProxyType(
    {
        "USD": Decimal("110"),
        "EUR": Decimal("120"),
    }
)


@dataclass(frozen=True)
class CacheEntry:
    rates: ExchangeRateMap
    fetched_at: datetime
    source: str
    is_fallback: bool = False

    @property
    def fetched_at_ms(self) -> int:
        return int(self.fetched_at.timestamp() * 1000)


@dataclass(frozen=True)
class RelayResponse:
    rates: ExchangeRateMap
    last_updated: str
    source: str
    error: str | None = None

    @property
    def is_degraded(self) -> bool:
        return bool(self.error)


def normalize_rates(raw: Mapping[str, object], currencies: Iterable[str]) -> ExchangeRateMap:
    """
    Build a validated rate map from loosely typed input.

    Every requested foreign currency must be present with a positive value.
    The base currency is always forced to exactly 1, whatever the input says.
    """
    rates: ExchangeRateMap = {}
    for code in currencies:
        if code == BASE_CURRENCY:
            continue
        if code not in raw or raw[code] is None:
            raise RateValidationError(f"Missing rate for {code}")
        try:
            value = Decimal(str(raw[code]))
        except (InvalidOperation, ValueError) as e:
            raise RateValidationError(f"Invalid rate for {code}: {raw[code]!r}") from e
        if not value.is_finite() or value <= 0:
            raise RateValidationError(f"Rate for {code} must be positive, got {value}")
        rates[code] = value

    rates[BASE_CURRENCY] = Decimal("1")
    return rates
