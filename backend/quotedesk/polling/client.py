from __future__ import annotations

import httpx
from fastapi import status

from quotedesk.schemas.quotes import BatchQuotesResponse, QuoteEntry

BATCH_QUOTES_PATH = "/api/finnhub/quotes"


class QuoteServiceClient:
    """Calls the batch quotes endpoint of a running quotedesk backend."""

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def fetch_quotes(self, symbols: list[str]) -> list[QuoteEntry]:
        response = await self._http.post(
            f"{self._base_url}{BATCH_QUOTES_PATH}", json={"symbols": symbols}
        )
        # A 504 still carries the per-symbol envelope.
        if response.status_code != status.HTTP_504_GATEWAY_TIMEOUT:
            response.raise_for_status()
        return BatchQuotesResponse.model_validate(response.json()).quotes
