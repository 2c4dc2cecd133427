"""
Terminal dashboard: polls a running quotedesk backend and logs the watchlist
and holdings rows.

Usage:
  python -m quotedesk.dashboard [search]

An optional search term narrows the watchlist rows by name, price or percent.
"""

from __future__ import annotations

import asyncio
import sys

import httpx

from quotedesk.config.settings import settings
from quotedesk.dashboard import seed
from quotedesk.dashboard.live import holdings_poller, watchlist_poller
from quotedesk.dashboard.view import filter_rows, holding_rows, watchlist_rows
from quotedesk.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def main(query: str = "") -> None:
    async with httpx.AsyncClient(timeout=settings.polling.request_timeout_seconds) as http:
        watchlist = watchlist_poller(http)
        holdings = holdings_poller(http)
        await watchlist.start()
        await holdings.start()
        try:
            while True:
                await asyncio.sleep(settings.polling.interval_seconds)
                rows = watchlist_rows(seed.WATCHLIST, watchlist.snapshot())
                for row in filter_rows(rows, query):
                    logger.info("watchlist_row", **row.model_dump())
                for row in holding_rows(seed.HOLDINGS, holdings.snapshot()):
                    logger.info("holding_row", **row.model_dump())
        finally:
            await watchlist.stop()
            await holdings.stop()


if __name__ == "__main__":
    configure_logging(service_name="dashboard")
    try:
        asyncio.run(main(" ".join(sys.argv[1:])))
    except KeyboardInterrupt:
        pass
