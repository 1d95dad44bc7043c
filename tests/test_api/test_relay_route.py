from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_relay_service
from api.main import app
from application.services.relay_service import RelayService
from domain.exceptions.currency import ProviderError
from infrastructure.providers.kursna_lista import KursnaListaProvider


@pytest.fixture
def mock_provider():
	provider = AsyncMock(spec=KursnaListaProvider)
	provider.name = 'kursna-lista.info'
	return provider


@pytest.fixture
def client(mock_provider):
	relay = RelayService(mock_provider, clock=lambda: datetime(2026, 10, 19, 8, 0, tzinfo=UTC))
	app.dependency_overrides[get_relay_service] = lambda: relay
	client = TestClient(app)
	yield client
	app.dependency_overrides.clear()


def test_relay_returns_upstream_rates(client, mock_provider):
	mock_provider.fetch_quotes.return_value = {
		'date': '19.10.2026',
		'eur': {'kup': '116.8', 'sre': '117.15', 'pro': '117.5'},
		'usd': {'kup': '99.0', 'sre': '99.31', 'pro': '99.6'},
	}

	response = client.get('/functions/v1/get-exchange-rates')

	assert response.status_code == 200
	assert response.json() == {
		'rates': {'USD': 99.31, 'EUR': 117.15, 'RSD': 1.0},
		'lastUpdated': '19.10.2026',
		'source': 'kursna-lista.info',
	}


def test_relay_upstream_failure_still_returns_200(client, mock_provider):
	mock_provider.fetch_quotes.side_effect = ProviderError('KURSNA_LISTA_API_ID not configured')

	response = client.get('/functions/v1/get-exchange-rates')

	assert response.status_code == 200
	data = response.json()
	assert data['rates'] == {'USD': 99.32, 'EUR': 117.16, 'RSD': 1.0}
	assert data['source'] == 'fallback'
	assert data['error'] == 'KURSNA_LISTA_API_ID not configured'
	assert data['lastUpdated'] == '2026-10-19T08:00:00+00:00'


def test_relay_allows_cross_origin_requests(client, mock_provider):
	mock_provider.fetch_quotes.side_effect = ProviderError('down')

	response = client.get(
		'/functions/v1/get-exchange-rates', headers={'Origin': 'http://dashboard.test'}
	)

	assert response.headers['access-control-allow-origin'] == '*'


def test_relay_schema_documents_example(client):
	schemas = client.get('/openapi.json').json()['components']['schemas']

	assert schemas['RelayRatesResponse']['example']['source'] == 'kursna-lista.info'
