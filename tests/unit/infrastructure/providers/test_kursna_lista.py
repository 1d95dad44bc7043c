# nosec B101


import pytest
from unittest.mock import Mock, AsyncMock
import httpx

from infrastructure.providers.kursna_lista import KursnaListaProvider
from domain.exceptions.currency import ProviderError


UPSTREAM_RESULT = {
	'date': '19.10.2026',
	'eur': {'kup': '116.8', 'sre': '117.15', 'pro': '117.5'},
	'usd': {'kup': '99.0', 'sre': '99.31', 'pro': '99.6'},
}


def make_client(payload):
	mock_client = AsyncMock(spec=httpx.AsyncClient)
	mock_response = Mock()
	mock_response.json.return_value = payload
	mock_response.raise_for_status = Mock()
	mock_client.get.return_value = mock_response
	return mock_client


@pytest.mark.asyncio
async def test_fetch_quotes_returns_result_object():
	mock_client = make_client({'result': UPSTREAM_RESULT})
	provider = KursnaListaProvider(api_id='abc123', client=mock_client)

	result = await provider.fetch_quotes()

	assert result == UPSTREAM_RESULT
	mock_client.get.assert_called_once_with('https://api.kursna-lista.info/abc123/kursna_lista/json')


@pytest.mark.asyncio
async def test_fetch_quotes_without_api_id_fails_before_request():
	mock_client = make_client({'result': UPSTREAM_RESULT})
	provider = KursnaListaProvider(api_id='', client=mock_client)

	with pytest.raises(ProviderError) as exc_info:
		await provider.fetch_quotes()

	assert 'KURSNA_LISTA_API_ID not configured' in str(exc_info.value)
	mock_client.get.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_quotes_missing_result():
	provider = KursnaListaProvider(api_id='abc123', client=make_client({'msg': 'invalid id'}))

	with pytest.raises(ProviderError) as exc_info:
		await provider.fetch_quotes()

	assert 'No result data from API' in str(exc_info.value)


@pytest.mark.asyncio
async def test_fetch_quotes_http_error():
	mock_client = AsyncMock(spec=httpx.AsyncClient)
	error_response = Mock()
	error_response.status_code = 502
	error_response.text = 'Bad Gateway'
	mock_client.get.side_effect = httpx.HTTPStatusError(
		'Bad gateway', request=Mock(), response=error_response
	)
	provider = KursnaListaProvider(api_id='abc123', client=mock_client)

	with pytest.raises(ProviderError) as exc_info:
		await provider.fetch_quotes()

	assert 'API request failed: 502' in str(exc_info.value)
	assert mock_client.get.call_count == 1


@pytest.mark.asyncio
async def test_fetch_quotes_transport_error_is_retried():
	mock_client = AsyncMock(spec=httpx.AsyncClient)
	mock_response = Mock()
	mock_response.json.return_value = {'result': UPSTREAM_RESULT}
	mock_response.raise_for_status = Mock()
	mock_client.get.side_effect = [httpx.ConnectError('refused'), mock_response]
	provider = KursnaListaProvider(api_id='abc123', client=mock_client, retry_attempts=2)

	result = await provider.fetch_quotes()

	assert result == UPSTREAM_RESULT
	assert mock_client.get.call_count == 2


@pytest.mark.asyncio
async def test_fetch_quotes_transport_error_single_attempt():
	mock_client = AsyncMock(spec=httpx.AsyncClient)
	mock_client.get.side_effect = httpx.ReadTimeout('timed out')
	provider = KursnaListaProvider(api_id='abc123', client=mock_client, retry_attempts=1)

	with pytest.raises(ProviderError) as exc_info:
		await provider.fetch_quotes()

	assert 'ReadTimeout' in str(exc_info.value)
	assert mock_client.get.call_count == 1


@pytest.mark.asyncio
async def test_fetch_quotes_invalid_json():
	mock_client = AsyncMock(spec=httpx.AsyncClient)
	mock_response = Mock()
	mock_response.json.side_effect = ValueError('Expecting value')
	mock_response.raise_for_status = Mock()
	mock_client.get.return_value = mock_response
	provider = KursnaListaProvider(api_id='abc123', client=mock_client)

	with pytest.raises(ProviderError) as exc_info:
		await provider.fetch_quotes()

	assert 'parsing error' in str(exc_info.value)


def test_provider_name():
	provider = KursnaListaProvider(api_id='abc123', client=AsyncMock(spec=httpx.AsyncClient))

	assert provider.name == 'kursna-lista.info'
