import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions.currency import ProviderError


class KursnaListaProvider:
	"""Upstream source of RSD exchange rates published by kursna-lista.info."""

	BASE_URL = 'https://api.kursna-lista.info'
	USER_AGENT = 'FinanceRates/1.0'

	def __init__(
		self,
		api_id: str,
		client: httpx.AsyncClient | None = None,
		timeout: float = 10,
		retry_attempts: int = 2,
	):
		self.api_id = api_id
		self.retry_attempts = max(1, retry_attempts)
		self._client = client or httpx.AsyncClient(
			timeout=timeout,
			headers={'User-Agent': self.USER_AGENT},
		)

	@property
	def name(self) -> str:
		return 'kursna-lista.info'

	async def fetch_quotes(self) -> dict:
		"""
		Return the ``result`` object of the upstream list: a date plus one
		entry per currency code, each with ``kup`` (buy), ``sre`` (middle)
		and ``pro`` (sell) quotes.
		"""
		if not self.api_id:
			raise ProviderError('KURSNA_LISTA_API_ID not configured')

		fetch = retry(
			stop=stop_after_attempt(self.retry_attempts),
			wait=wait_exponential(multiplier=1, min=1, max=10),
			retry=retry_if_exception_type(httpx.TransportError),
			reraise=True,
		)(self._get)

		try:
			response = await fetch()
			response.raise_for_status()
			data = response.json()
		except httpx.HTTPStatusError as e:
			raise ProviderError(f'API request failed: {e.response.status_code}') from e
		except httpx.RequestError as e:
			raise ProviderError(f'Kursna lista request failed: {e.__class__.__name__}') from e
		except Exception as e:
			raise ProviderError(f'Kursna lista response parsing error: {str(e)}') from e

		result = data.get('result') if isinstance(data, dict) else None
		if not result:
			raise ProviderError('No result data from API')

		return result

	async def _get(self) -> httpx.Response:
		return await self._client.get(f'{self.BASE_URL}/{self.api_id}/kursna_lista/json')

	async def close(self) -> None:
		await self._client.aclose()
