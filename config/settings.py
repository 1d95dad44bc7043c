from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./finance_rates.db'

	REDIS_URL: str = 'redis://localhost:6379'

	# Relay (server side)
	KURSNA_LISTA_API_ID: str = ''
	UPSTREAM_RETRY_ATTEMPTS: int = 2

	# Rate source (client side)
	RELAY_URL: str = 'http://localhost:8000/functions/v1/get-exchange-rates'
	HTTP_TIMEOUT_SECONDS: float = 10.0
	FOREIGN_CURRENCIES: list[str] = ['USD', 'EUR']

	# Cache
	RATE_FRESHNESS_HOURS: int = 24
	FALLBACK_FRESHNESS_MINUTES: int | None = None
	ALWAYS_REFETCH: bool = False

	# Background refresh
	ENABLE_REFRESHER: bool = False
	REFRESH_INTERVAL_MINUTES: int = 30

	# Application
	APP_NAME: str = 'Finance Rates API'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
