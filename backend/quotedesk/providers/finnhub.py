from __future__ import annotations

from typing import Any

import httpx

from quotedesk.errors import UpstreamError

_QUOTE_PATH = "/quote"
_PROFILE_PATH = "/stock/profile2"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return response.reason_phrase or f"HTTP {response.status_code}"


class FinnhubClient:
    """Thin async wrapper over the Finnhub REST endpoints used by the dashboard.

    The ``httpx.AsyncClient`` is owned by the caller so one connection pool
    serves the whole process.
    """

    def __init__(self, api_key: str, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _get(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._http.get(url, params={**params, "token": self._api_key})
        except httpx.HTTPError as exc:
            raise UpstreamError(str(exc) or exc.__class__.__name__) from exc

        if response.is_error:
            raise UpstreamError(_error_message(response), upstream_status=response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError("Malformed response from provider") from exc
        if not isinstance(payload, dict):
            raise UpstreamError("Malformed response from provider")
        return payload

    async def quote(self, symbol: str) -> dict[str, Any]:
        return await self._get(_QUOTE_PATH, {"symbol": symbol})

    async def company_profile(self, symbol: str) -> dict[str, Any]:
        return await self._get(_PROFILE_PATH, {"symbol": symbol})
