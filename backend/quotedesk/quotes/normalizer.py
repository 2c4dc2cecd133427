from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from quotedesk.schemas.quotes import (
    NO_PRICE_MESSAGE,
    QuoteData,
    QuoteFailure,
    QuoteResult,
    QuoteSuccess,
)

_OPTIONAL_FIELDS = ("h", "l", "o", "pc")


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    if not math.isfinite(number):
        return None
    return number


def normalize_quote(symbol: str, payload: Any) -> QuoteResult:
    """Map a raw provider payload to a success or an ``invalid_payload`` failure.

    A usable price is a finite, non-zero number under ``c``; the provider
    answers unknown symbols with ``c: 0``. Missing change fields default to 0.
    """
    if not isinstance(payload, Mapping):
        return QuoteFailure(symbol=symbol, reason="invalid_payload", error=NO_PRICE_MESSAGE)

    price = _as_number(payload.get("c"))
    if not price:
        return QuoteFailure(symbol=symbol, reason="invalid_payload", error=NO_PRICE_MESSAGE)

    fields: dict[str, Any] = {
        "c": price,
        "d": _as_number(payload.get("d")) or 0.0,
        "dp": _as_number(payload.get("dp")) or 0.0,
    }
    for key in _OPTIONAL_FIELDS:
        value = _as_number(payload.get(key))
        if value is not None:
            fields[key] = value
    timestamp = _as_number(payload.get("t"))
    if timestamp is not None:
        fields["t"] = int(timestamp)

    return QuoteSuccess(symbol=symbol, data=QuoteData(**fields))
