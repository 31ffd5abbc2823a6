import logging
from collections.abc import Sequence
from datetime import UTC, datetime

import httpx

from domain.models.currency import RateSnapshot
from infrastructure.providers.base import BaseHTTPProvider

logger = logging.getLogger(__name__)


class OpenExchangeProvider(BaseHTTPProvider):
    BASE_URL = "https://openexchangerates.org/api"

    def __init__(
        self,
        app_id: str,
        client: httpx.AsyncClient | None = None,
        timeout: int = 10,
        retry_attempts: int = 3,
    ):
        super().__init__(client=client, timeout=timeout, retry_attempts=retry_attempts)
        self.app_id = app_id

    @property
    def name(self) -> str:
        return "openexchange"

    async def fetch_latest(
        self, base: str | None = None, symbols: Sequence[str] | None = None
    ) -> RateSnapshot:
        params = {"app_id": self.app_id}
        if base:
            params["base"] = base
        if symbols:
            params["symbols"] = ",".join(symbols)

        data = await self._request("latest.json", params)

        if data.get("error"):
            message = data.get("description", data.get("message", "Unknown error"))
            logger.warning(f"OpenExchange API error: {message}")
            return RateSnapshot.failure(self.name)

        if not data.get("rates") or not data.get("base"):
            logger.warning("OpenExchange returned a response without rates")
            return RateSnapshot.failure(self.name)

        as_of = None
        if isinstance(data.get("timestamp"), int | float):
            as_of = datetime.fromtimestamp(data["timestamp"], tz=UTC).date()

        return RateSnapshot(
            base_currency=str(data["base"]).upper(),
            as_of_date=as_of,
            rates=self._parse_rates(data["rates"]),
            success=True,
            provider_name=self.name,
        )
