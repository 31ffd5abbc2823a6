import logging
from collections.abc import Sequence
from datetime import datetime

import httpx

from domain.exceptions.currency import ProviderError
from domain.models.currency import RateSnapshot
from infrastructure.providers.base import BaseHTTPProvider

logger = logging.getLogger(__name__)

DEFAULT_BASE = "USD"


class CurrencyAPIProvider(BaseHTTPProvider):
    BASE_URL = "https://api.currencyapi.com/v3"

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: int = 10,
        retry_attempts: int = 3,
    ):
        super().__init__(
            client=client,
            timeout=timeout,
            retry_attempts=retry_attempts,
            headers={"apikey": api_key},
        )
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "currencyapi"

    async def fetch_latest(
        self, base: str | None = None, symbols: Sequence[str] | None = None
    ) -> RateSnapshot:
        base_currency = (base or DEFAULT_BASE).upper()
        params = {"base_currency": base_currency}
        if symbols:
            params["currencies"] = ",".join(symbols)

        data = await self._request("latest", params)

        if "error" in data or "errors" in data:
            logger.warning(f"CurrencyAPI error: {data.get('message', 'Unknown error')}")
            return RateSnapshot.failure(self.name)

        raw = data.get("data")
        if not raw or not isinstance(data.get("meta"), dict):
            logger.warning("CurrencyAPI returned a response without data or meta")
            return RateSnapshot.failure(self.name)

        try:
            raw_rates = {code: info["value"] for code, info in raw.items()}
        except (KeyError, TypeError) as e:
            raise ProviderError("CurrencyAPI response parsing error: missing value") from e

        as_of = None
        last_updated = data["meta"].get("last_updated_at")
        if last_updated:
            try:
                as_of = datetime.fromisoformat(last_updated.replace("Z", "+00:00")).date()
            except ValueError:
                logger.debug(f"CurrencyAPI: unparseable last_updated_at {last_updated!r}")

        return RateSnapshot(
            base_currency=base_currency,
            as_of_date=as_of,
            rates=self._parse_rates(raw_rates),
            success=True,
            provider_name=self.name,
        )
