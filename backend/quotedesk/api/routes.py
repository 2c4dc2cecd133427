from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from quotedesk import cache
from quotedesk.config.settings import settings
from quotedesk.dashboard import seed
from quotedesk.errors import InvalidArgument, UpstreamError
from quotedesk.providers.integration import QuoteIntegration
from quotedesk.quotes.aggregator import aggregate_quotes, unique_symbols
from quotedesk.quotes.guard import guard_quote
from quotedesk.schemas.portfolio import HoldingsResponse, WatchlistResponse
from quotedesk.schemas.quotes import (
    TIMEOUT_MESSAGE,
    BatchQuotesResponse,
    QuoteEntry,
    QuoteSuccess,
)
from quotedesk.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()
finnhub_router = APIRouter(prefix="/api/finnhub")


def get_integration(request: Request) -> QuoteIntegration:
    return request.app.state.quote_integration


def _require_symbol(symbol: str) -> str:
    cleaned = symbol.strip()
    if not cleaned:
        raise InvalidArgument("Symbol is required")
    return cleaned


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return None


def _extract_symbols(payload: Any) -> list[str]:
    symbols = payload.get("symbols") if isinstance(payload, dict) else None
    if not isinstance(symbols, list) or not symbols:
        raise InvalidArgument("Symbols array is required")
    return unique_symbols(symbols)


def _batch_response(status_code: int, body: BatchQuotesResponse) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.get("/health")
def health(integration: QuoteIntegration = Depends(get_integration)) -> dict:
    return {
        "status": "ok",
        "finnhub": "available" if integration.is_available else "unavailable",
    }


@router.get("/allHoldings", response_model=HoldingsResponse)
def all_holdings() -> HoldingsResponse:
    return HoldingsResponse(all_holdings=seed.HOLDINGS)


@router.get("/watchlist", response_model=WatchlistResponse)
def watchlist() -> WatchlistResponse:
    return WatchlistResponse(watchlist=seed.WATCHLIST)


@finnhub_router.get("/quote/{symbol}")
async def quote_endpoint(
    symbol: str, integration: QuoteIntegration = Depends(get_integration)
) -> dict:
    client = integration.require()
    symbol = _require_symbol(symbol)

    result = await guard_quote(
        symbol, client.quote, settings.quotes.per_item_timeout_seconds
    )
    if isinstance(result, QuoteSuccess):
        return result.data.to_wire()
    raise UpstreamError("Failed to fetch quote", details=result.error)


@finnhub_router.get("/profile/{symbol}")
async def profile_endpoint(
    symbol: str, integration: QuoteIntegration = Depends(get_integration)
) -> dict:
    client = integration.require()
    symbol = _require_symbol(symbol)

    cached = await cache.get_profile(symbol)
    if cached is not None:
        return cached

    try:
        profile = await client.company_profile(symbol)
    except UpstreamError as exc:
        logger.error("profile_fetch_failed", symbol=symbol, error=exc.message)
        raise UpstreamError(
            "Failed to fetch profile",
            upstream_status=exc.upstream_status,
            details=exc.message,
        ) from exc

    await cache.set_profile(symbol, profile, settings.profile_cache_ttl_seconds)
    return profile


@finnhub_router.post("/quotes", response_model=BatchQuotesResponse)
async def batch_quotes_endpoint(
    request: Request,
    integration: QuoteIntegration = Depends(get_integration),
) -> JSONResponse:
    # Unparseable bodies fall through to the same 400 as a missing symbol list.
    payload = await _read_json(request)
    if not integration.is_available:
        requested = payload.get("symbols") if isinstance(payload, dict) else None
        echoed = [
            QuoteEntry(symbol=symbol, error="API key not configured")
            for symbol in (requested if isinstance(requested, list) else [])
            if isinstance(symbol, str)
        ]
        return _batch_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            BatchQuotesResponse(error=integration.reason, quotes=echoed),
        )

    symbols = _extract_symbols(payload)
    envelope = await aggregate_quotes(
        symbols,
        integration.require().quote,
        per_item_timeout=settings.quotes.per_item_timeout_seconds,
        overall_timeout=settings.quotes.batch_timeout_seconds,
    )
    body = BatchQuotesResponse(quotes=envelope.to_entries())
    if envelope.timed_out:
        body.error = TIMEOUT_MESSAGE
        return _batch_response(status.HTTP_504_GATEWAY_TIMEOUT, body)
    return _batch_response(status.HTTP_200_OK, body)
