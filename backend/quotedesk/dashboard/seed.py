"""Static demo portfolio shown until live quotes arrive."""

from __future__ import annotations

from quotedesk.schemas.portfolio import Holding, WatchlistItem

HOLDINGS: list[Holding] = [
    Holding(name="AAPL", qty=10, avg=172.40, price=189.84, net="+10.12%", day="+0.54%"),
    Holding(name="MSFT", qty=4, avg=331.10, price=415.50, net="+25.49%", day="+1.12%"),
    Holding(name="GOOGL", qty=6, avg=141.80, price=138.21, net="-2.53%", day="-0.87%", is_loss=True),
    Holding(name="AMZN", qty=5, avg=128.35, price=178.22, net="+38.86%", day="+0.31%"),
    Holding(name="NVDA", qty=3, avg=452.00, price=875.28, net="+93.65%", day="+2.48%"),
    Holding(name="TSLA", qty=8, avg=245.60, price=171.05, net="-30.35%", day="-1.94%", is_loss=True),
    Holding(name="META", qty=2, avg=298.75, price=496.09, net="+66.06%", day="+0.77%"),
    Holding(name="JPM", qty=7, avg=146.20, price=196.62, net="+34.49%", day="-0.12%", is_loss=True),
]

WATCHLIST: list[WatchlistItem] = [
    WatchlistItem(name="AAPL", price=189.84, percent="+0.54%"),
    WatchlistItem(name="MSFT", price=415.50, percent="+1.12%"),
    WatchlistItem(name="GOOGL", price=138.21, percent="-0.87%", is_down=True),
    WatchlistItem(name="AMZN", price=178.22, percent="+0.31%"),
    WatchlistItem(name="NVDA", price=875.28, percent="+2.48%"),
    WatchlistItem(name="TSLA", price=171.05, percent="-1.94%", is_down=True),
    WatchlistItem(name="META", price=496.09, percent="+0.77%"),
    WatchlistItem(name="NFLX", price=605.88, percent="+0.42%"),
    WatchlistItem(name="AMD", price=164.69, percent="-1.05%", is_down=True),
    WatchlistItem(name="INTC", price=43.12, percent="-0.28%", is_down=True),
    WatchlistItem(name="ORCL", price=124.56, percent="+0.63%"),
    WatchlistItem(name="AAPL", price=189.84, percent="+0.54%"),
]
