from datetime import timedelta
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./currency_converter.db'

	REDIS_URL: str = 'redis://localhost:6379'

	FIXERIO_API_KEY: str = ''
	OPENEXCHANGE_APP_ID: str = ''
	CURRENCYAPI_API_KEY: str = ''

	# Providers, first listed is tried first
	PROVIDER_ORDER: str = 'fixerio,openexchange,currencyapi'
	PROVIDER_TIMEOUT_SECONDS: int = 10
	PROVIDER_RETRY_ATTEMPTS: int = 3

	# Rates
	CACHE_TTL_SECONDS: int = 3600
	RETENTION_DAYS: int = 395
	SUPPORTED_CURRENCIES_TTL_HOURS: int = 24

	# Maintenance worker
	REFRESH_INTERVAL_SECONDS: int = 3600
	CLEANUP_INTERVAL_SECONDS: int = 86400

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str = 'logs'
	LOG_TO_FILE: bool = False

	# Application
	APP_NAME: str = 'Currency Converter API'
	DEBUG: bool = True

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@property
	def provider_order(self) -> list[str]:
		return [name.strip().lower() for name in self.PROVIDER_ORDER.split(',') if name.strip()]

	@property
	def cache_ttl(self) -> timedelta:
		return timedelta(seconds=self.CACHE_TTL_SECONDS)

	@property
	def retention(self) -> timedelta:
		return timedelta(days=self.RETENTION_DAYS)


@lru_cache
def get_settings() -> Settings:
	return Settings()
