from __future__ import annotations

import httpx

from quotedesk.config.settings import PollingSettings, settings
from quotedesk.dashboard import seed
from quotedesk.dashboard.view import holding_symbols, watchlist_symbols
from quotedesk.polling.client import QuoteServiceClient
from quotedesk.polling.poller import LivePricePoller


def _poller(
    http_client: httpx.AsyncClient, polling: PollingSettings, symbols_provider
) -> LivePricePoller:
    client = QuoteServiceClient(http_client, polling.service_url)
    return LivePricePoller(
        fetch_batch=client.fetch_quotes,
        symbols_provider=symbols_provider,
        interval_seconds=polling.interval_seconds,
        request_timeout_seconds=polling.request_timeout_seconds,
    )


def watchlist_poller(
    http_client: httpx.AsyncClient, polling: PollingSettings | None = None
) -> LivePricePoller:
    polling = polling or settings.polling
    return _poller(
        http_client,
        polling,
        lambda: watchlist_symbols(seed.WATCHLIST, limit=polling.max_symbols),
    )


def holdings_poller(
    http_client: httpx.AsyncClient, polling: PollingSettings | None = None
) -> LivePricePoller:
    polling = polling or settings.polling
    return _poller(http_client, polling, lambda: holding_symbols(seed.HOLDINGS))
