import logging

import httpx

from domain.exceptions.currency import ProviderError, RateValidationError
from domain.models.currency import DEFAULT_FOREIGN_CURRENCIES, RelayResponse, normalize_rates

logger = logging.getLogger(__name__)


class RelayRateSource:
    """
    Client for the exchange rate relay.

    One attempt per call with a bounded timeout. The relay already absorbs
    upstream outages, so anything that goes wrong here is reported as a
    ProviderError and left to the caller's cache policy.
    """

    def __init__(
        self,
        relay_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10,
        currencies: tuple[str, ...] = DEFAULT_FOREIGN_CURRENCIES,
    ):
        self.relay_url = relay_url
        self.currencies = tuple(currencies)
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def fetch_rates(self) -> RelayResponse:
        try:
            response = await self._client.get(self.relay_url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Relay HTTP error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"Relay request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise ProviderError(f"Relay response parsing error: {str(e)}") from e

        if not isinstance(data, dict) or not isinstance(data.get("rates"), dict):
            raise ProviderError("Relay response has no rates")

        try:
            rates = normalize_rates(data["rates"], self.currencies)
        except RateValidationError as e:
            raise ProviderError(f"Relay returned invalid rates: {e}") from e

        error = data.get("error") or None
        if error:
            logger.warning(f"Exchange rate relay warning: {error}")

        return RelayResponse(
            rates=rates,
            last_updated=str(data.get("lastUpdated", "")),
            source=str(data.get("source", "unknown")),
            error=error,
        )

    async def close(self) -> None:
        await self._client.aclose()
