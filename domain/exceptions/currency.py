class CurrencyException(Exception):
    pass


class InvalidCurrencyError(CurrencyException):
    """Currency code outside the configured set."""


class ProviderError(CurrencyException):
    """A rate source could not deliver usable rates."""


class CacheError(CurrencyException):
    """Persisted cache content could not be decoded."""


class RateValidationError(CurrencyException):
    """A rate map is missing a currency or holds a non-positive rate."""
