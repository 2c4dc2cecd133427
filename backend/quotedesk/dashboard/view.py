from __future__ import annotations

from collections.abc import Iterable, Mapping

from quotedesk.polling.poller import LivePrice
from quotedesk.schemas.portfolio import Holding, HoldingRow, WatchlistItem, WatchlistRow


def format_percent(value: float) -> str:
    return f"+{value:.2f}%" if value >= 0 else f"{value:.2f}%"


def unique_names(names: Iterable[str], limit: int | None = None) -> list[str]:
    ordered = list(dict.fromkeys(name for name in names if name))
    if limit is not None:
        return ordered[:limit]
    return ordered


def watchlist_symbols(items: Iterable[WatchlistItem], limit: int | None = None) -> list[str]:
    return unique_names((item.name for item in items), limit)


def holding_symbols(holdings: Iterable[Holding]) -> list[str]:
    return unique_names(holding.name for holding in holdings)


def watchlist_rows(
    items: Iterable[WatchlistItem], live_prices: Mapping[str, LivePrice]
) -> list[WatchlistRow]:
    rows: list[WatchlistRow] = []
    for item in items:
        live = live_prices.get(item.name)
        if live is None:
            rows.append(
                WatchlistRow(
                    name=item.name,
                    price=item.price,
                    percent=item.percent,
                    is_down=item.is_down,
                    is_live=False,
                )
            )
            continue
        rows.append(
            WatchlistRow(
                name=item.name,
                price=live.price,
                percent=format_percent(live.percent_change),
                is_down=live.is_down,
                is_live=True,
            )
        )
    return rows


def holding_rows(
    holdings: Iterable[Holding], live_prices: Mapping[str, LivePrice]
) -> list[HoldingRow]:
    rows: list[HoldingRow] = []
    for holding in holdings:
        live = live_prices.get(holding.name)
        price = live.price if live is not None else holding.price
        current_value = price * holding.qty
        profit_and_loss = current_value - holding.avg * holding.qty
        if live is not None:
            day = format_percent(live.percent_change)
            is_day_loss = live.percent_change < 0
        else:
            day = holding.day or "N/A"
            is_day_loss = holding.is_loss
        rows.append(
            HoldingRow(
                name=holding.name,
                qty=holding.qty,
                avg=holding.avg,
                price=price,
                current_value=round(current_value, 2),
                profit_and_loss=round(profit_and_loss, 2),
                is_profit=profit_and_loss >= 0.0,
                net=holding.net or "N/A",
                day=day,
                is_day_loss=is_day_loss,
                is_live=live is not None,
            )
        )
    return rows


def _price_text(price: float) -> str:
    # Whole prices render without a trailing ".0", as the dashboard shows them.
    return str(int(price)) if price.is_integer() else repr(price)


def filter_rows(rows: Iterable[WatchlistRow], query: str) -> list[WatchlistRow]:
    """Keep rows whose name, price or percent contains ``query``.

    Matching is case-insensitive on the trimmed query; a blank query keeps
    every row.
    """
    needle = query.strip().lower()
    if not needle:
        return list(rows)
    return [
        row
        for row in rows
        if needle in row.name.lower()
        or needle in _price_text(row.price)
        or needle in row.percent.lower()
    ]
