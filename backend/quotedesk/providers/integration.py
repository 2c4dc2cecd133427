from __future__ import annotations

from typing import Any, Protocol

import httpx

from quotedesk.config.settings import ProviderSettings
from quotedesk.errors import IntegrationUnavailable
from quotedesk.providers.finnhub import FinnhubClient

MISSING_KEY_MESSAGE = "Finnhub API key not configured"


class QuoteClient(Protocol):
    async def quote(self, symbol: str) -> dict[str, Any]: ...

    async def company_profile(self, symbol: str) -> dict[str, Any]: ...


class QuoteIntegration:
    """The process-wide upstream client, or the reason there is none."""

    def __init__(self, client: QuoteClient | None, reason: str | None = None) -> None:
        self._client = client
        self.reason = reason

    @classmethod
    def available(cls, client: QuoteClient) -> "QuoteIntegration":
        return cls(client)

    @classmethod
    def unavailable(cls, reason: str) -> "QuoteIntegration":
        return cls(None, reason)

    @classmethod
    def from_settings(
        cls, providers: ProviderSettings, http_client: httpx.AsyncClient
    ) -> "QuoteIntegration":
        if not providers.finnhub_api_key:
            return cls.unavailable(MISSING_KEY_MESSAGE)
        return cls.available(
            FinnhubClient(
                api_key=providers.finnhub_api_key,
                http_client=http_client,
                base_url=providers.finnhub_base_url,
            )
        )

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def require(self) -> QuoteClient:
        if self._client is None:
            raise IntegrationUnavailable(self.reason or MISSING_KEY_MESSAGE)
        return self._client
