from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from typing import Any

from quotedesk.errors import InvalidArgument
from quotedesk.quotes.guard import FetchQuote, abandon, guard_quote
from quotedesk.schemas.quotes import BatchEnvelope, QuoteResult, timeout_failure
from quotedesk.utils.logger import get_logger

logger = get_logger(__name__)


def unique_symbols(symbols: Any) -> list[str]:
    """De-duplicate ``symbols`` keeping first-seen order.

    Raises InvalidArgument for anything that is not a collection of
    non-empty strings.
    """
    if isinstance(symbols, (str, bytes, Mapping)) or not isinstance(symbols, Iterable):
        raise InvalidArgument("Symbols must be a collection of strings")
    unique: dict[str, None] = {}
    for symbol in symbols:
        if not isinstance(symbol, str) or not symbol.strip():
            raise InvalidArgument("Symbols must be non-empty strings")
        unique.setdefault(symbol, None)
    return list(unique)


async def aggregate_quotes(
    symbols: Iterable[str],
    fetch_quote: FetchQuote,
    per_item_timeout: float,
    overall_timeout: float,
) -> BatchEnvelope:
    """Fetch one quote per symbol concurrently under two independent deadlines.

    Every symbol gets its own guarded lookup bounded by ``per_item_timeout``.
    The whole batch is bounded by ``overall_timeout``; symbols still pending
    when it fires are reported as timeouts and their lookups are abandoned.
    Results follow the first-seen order of ``symbols``.
    """
    ordered = unique_symbols(symbols)
    if not ordered:
        return BatchEnvelope()

    tasks = {
        symbol: asyncio.ensure_future(guard_quote(symbol, fetch_quote, per_item_timeout))
        for symbol in ordered
    }
    _, pending = await asyncio.wait(tasks.values(), timeout=overall_timeout)

    results: list[QuoteResult] = []
    for symbol, task in tasks.items():
        if task in pending:
            abandon(task)
            results.append(timeout_failure(symbol))
        else:
            results.append(task.result())

    if pending:
        logger.warning(
            "batch_quotes_timed_out",
            symbol_count=len(ordered),
            pending_count=len(pending),
            timeout_seconds=overall_timeout,
        )
    return BatchEnvelope(results=results, timed_out=bool(pending))
