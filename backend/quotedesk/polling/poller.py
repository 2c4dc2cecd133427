"""
Consumer-side live price polling.

A LivePricePoller repeatedly asks the batch endpoint for quotes and keeps the
last good price per symbol. Failed symbols keep their previous entry. Each
cycle carries a sequence number; a symbol is only overwritten by a cycle newer
than the one that last wrote it, so a slow cycle cannot clobber fresher data.
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime
from collections.abc import Awaitable, Callable, Iterable

import httpx
from pydantic import BaseModel, ConfigDict

from quotedesk.schemas.quotes import QuoteEntry
from quotedesk.utils.logger import get_logger

logger = get_logger(__name__)

FetchBatch = Callable[[list[str]], Awaitable[list[QuoteEntry]]]
SymbolsProvider = Callable[[], Iterable[str]]


class LivePrice(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float
    change: float
    percent_change: float
    last_updated: datetime.datetime

    @property
    def is_down(self) -> bool:
        return self.change < 0


class LivePricePoller:
    def __init__(
        self,
        fetch_batch: FetchBatch,
        symbols_provider: SymbolsProvider,
        interval_seconds: float = 10.0,
        request_timeout_seconds: float = 3.0,
    ) -> None:
        self._fetch_batch = fetch_batch
        self._symbols_provider = symbols_provider
        self._interval = interval_seconds
        self._request_timeout = request_timeout_seconds

        self._cache: dict[str, LivePrice] = {}
        self._merged_sequence: dict[str, int] = {}
        self._sequence = 0
        # Bumped on start and stop; cycles from an older epoch never merge.
        self._epoch = 0
        self._running = False
        # Set by stop(); a stopped poller no longer merges manual cycles either.
        self._stopped = False
        self._timer_task: asyncio.Task | None = None
        self._cycle_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    def snapshot(self) -> dict[str, LivePrice]:
        return dict(self._cache)

    async def start(self) -> None:
        if self._running:
            raise RuntimeError("poller is already running")
        self._running = True
        self._stopped = False
        self._epoch += 1
        epoch = self._epoch
        self._cycle_task = asyncio.create_task(self._run_cycle(epoch))
        self._timer_task = asyncio.create_task(self._schedule(epoch))
        logger.info("live_prices_polling_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        self._stopped = True
        self._epoch += 1
        timer, self._timer_task = self._timer_task, None
        if timer is not None:
            timer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await timer
        logger.info("live_prices_polling_stopped")

    async def run_cycle(self) -> int:
        """Run one poll now and return how many symbols were merged.

        A poller that was never started can still be driven by hand; once
        stop() has been called, manual cycles are ignored until start().
        """
        if self._stopped:
            logger.debug("live_prices_cycle_ignored_after_stop")
            return 0
        return await self._run_cycle(self._epoch)

    async def _schedule(self, epoch: int) -> None:
        loop = asyncio.get_running_loop()
        next_start = loop.time() + self._interval
        while True:
            await asyncio.sleep(max(0.0, next_start - loop.time()))
            if self._cycle_task is not None and not self._cycle_task.done():
                logger.debug("live_prices_tick_skipped")
            else:
                self._cycle_task = asyncio.create_task(self._run_cycle(epoch))
            # Fixed rate: ticks that were missed entirely are dropped.
            now = loop.time()
            next_start += self._interval
            while next_start <= now:
                next_start += self._interval

    async def _run_cycle(self, epoch: int) -> int:
        self._sequence += 1
        sequence = self._sequence

        try:
            symbols = list(dict.fromkeys(self._symbols_provider()))
            if not symbols:
                return 0
            entries = await asyncio.wait_for(
                self._fetch_batch(symbols), timeout=self._request_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "live_prices_request_timed_out",
                sequence=sequence,
                timeout_seconds=self._request_timeout,
            )
            return 0
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("live_prices_fetch_failed", sequence=sequence, error=str(exc))
            return 0
        except Exception:
            logger.exception("live_prices_cycle_crashed", sequence=sequence)
            return 0

        return self._merge(entries, symbols, sequence, epoch)

    def _merge(
        self, entries: list[QuoteEntry], symbols: list[str], sequence: int, epoch: int
    ) -> int:
        if epoch != self._epoch:
            logger.debug("live_prices_discarded", sequence=sequence)
            return 0

        requested = set(symbols)
        now = datetime.datetime.now(datetime.timezone.utc)
        merged = 0
        for entry in entries:
            if entry.symbol not in requested or not entry.is_success:
                continue
            if sequence <= self._merged_sequence.get(entry.symbol, 0):
                continue
            self._merged_sequence[entry.symbol] = sequence
            self._cache[entry.symbol] = LivePrice(
                price=entry.data.price,
                change=entry.data.change,
                percent_change=entry.data.percent_change,
                last_updated=now,
            )
            merged += 1
        return merged
