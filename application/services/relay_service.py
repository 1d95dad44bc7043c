import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation

from application.services.exchange_rate_service import FALLBACK_SOURCE, utc_now
from domain.exceptions.currency import ProviderError
from domain.models.currency import (
	BASE_CURRENCY,
	DEFAULT_FOREIGN_CURRENCIES,
	FALLBACK_RATES,
	MISSING_CURRENCY_DEFAULTS,
	ExchangeRateMap,
	RelayResponse,
	normalize_rates,
)
from infrastructure.providers.kursna_lista import KursnaListaProvider

logger = logging.getLogger(__name__)


class RelayService:
	"""Server side of the rate relay: upstream quotes in, RSD rate map out, never an error."""

	def __init__(
		self,
		provider: KursnaListaProvider,
		currencies: tuple[str, ...] = DEFAULT_FOREIGN_CURRENCIES,
		fallback_rates: Mapping[str, Decimal] = FALLBACK_RATES,
		clock: Callable[[], datetime] = utc_now,
	):
		self.provider = provider
		self.currencies = tuple(currencies)
		self.fallback_rates = normalize_rates(fallback_rates, self.currencies)
		self.clock = clock

	async def get_rates(self) -> RelayResponse:
		try:
			result = await self.provider.fetch_quotes()
			rates = self.extract_rates(result)
		except Exception as e:
			logger.error(f'Error fetching exchange rates: {e}')
			return RelayResponse(
				rates=dict(self.fallback_rates),
				last_updated=self.clock().isoformat(),
				source=FALLBACK_SOURCE,
				error=str(e) or e.__class__.__name__,
			)

		logger.info(f'Fetched exchange rates: {rates}')
		return RelayResponse(
			rates=rates,
			last_updated=str(result.get('date') or self.clock().isoformat()),
			source=self.provider.name,
		)

	def extract_rates(self, result: dict) -> ExchangeRateMap:
		"""Take the middle (``sre``) quote of each tracked currency from the upstream list."""
		quotes = {str(code).upper(): quote for code, quote in result.items()}

		rates: ExchangeRateMap = {}
		for code in self.currencies:
			if code == BASE_CURRENCY:
				continue

			quote = quotes.get(code)
			if not isinstance(quote, dict) or quote.get('sre') in (None, ''):
				if code not in MISSING_CURRENCY_DEFAULTS:
					raise ProviderError(f'No quote for {code} and no default configured')
				rates[code] = MISSING_CURRENCY_DEFAULTS[code]
				continue

			try:
				rates[code] = Decimal(str(quote['sre']))
			except InvalidOperation as e:
				raise ProviderError(f'Invalid middle rate for {code}: {quote["sre"]!r}') from e

		return normalize_rates(rates, self.currencies)
