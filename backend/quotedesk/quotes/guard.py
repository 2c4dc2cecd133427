from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from quotedesk.errors import UpstreamError
from quotedesk.quotes.normalizer import normalize_quote
from quotedesk.schemas.quotes import QuoteFailure, QuoteResult, timeout_failure
from quotedesk.utils.logger import get_logger

logger = get_logger(__name__)

FetchQuote = Callable[[str], Awaitable[Any]]

# Strong references to tasks we stopped awaiting, so they can run to completion.
_abandoned: set[asyncio.Future] = set()


def _discard_outcome(task: asyncio.Future) -> None:
    _abandoned.discard(task)
    if not task.cancelled():
        # Marks a late exception as retrieved; the value itself is dropped.
        task.exception()


def abandon(task: asyncio.Future) -> None:
    """Stop awaiting ``task`` without cancelling it; its outcome is discarded."""
    if task.done():
        _discard_outcome(task)
        return
    _abandoned.add(task)
    task.add_done_callback(_discard_outcome)


async def guard_quote(
    symbol: str, fetch_quote: FetchQuote, timeout_seconds: float
) -> QuoteResult:
    task = asyncio.ensure_future(fetch_quote(symbol))
    done, _ = await asyncio.wait({task}, timeout=timeout_seconds)
    if not done:
        abandon(task)
        logger.debug("quote_fetch_timed_out", symbol=symbol, timeout_seconds=timeout_seconds)
        return timeout_failure(symbol)

    try:
        payload = task.result()
    except UpstreamError as exc:
        if exc.is_benign:
            logger.debug("quote_fetch_rejected", symbol=symbol, error=exc.message)
        else:
            logger.error("quote_fetch_failed", symbol=symbol, error=exc.message)
        return QuoteFailure(symbol=symbol, reason="upstream_error", error=exc.message)
    except Exception:
        logger.exception("quote_fetch_crashed", symbol=symbol)
        return QuoteFailure(symbol=symbol, reason="upstream_error", error="Failed to fetch")

    return normalize_quote(symbol, payload)
