from __future__ import annotations

import json

from redis.asyncio import Redis

from quotedesk.config.settings import settings
from quotedesk.utils.logger import get_logger

logger = get_logger(__name__)


def _get_client() -> Redis:
    return Redis.from_url(settings.redis_url)


def profile_cache_key(symbol: str) -> str:
    return f"finnhub:profile:{symbol}"


async def get_profile(symbol: str) -> dict | None:
    try:
        async with _get_client() as client:
            raw = await client.get(profile_cache_key(symbol))
    except Exception as exc:
        logger.warning("profile_cache_read_failed", symbol=symbol, error=str(exc))
        return None

    if not raw:
        return None

    try:
        payload = json.loads(raw)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return payload if isinstance(payload, dict) else None


async def set_profile(symbol: str, payload: dict, ttl_seconds: int) -> None:
    try:
        async with _get_client() as client:
            await client.setex(profile_cache_key(symbol), ttl_seconds, json.dumps(payload))
    except Exception as exc:
        logger.warning("profile_cache_write_failed", symbol=symbol, error=str(exc))
