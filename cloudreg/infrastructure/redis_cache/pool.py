from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from cloudreg.settings import get_settings

_client: Optional[Redis] = None


def get_redis() -> Redis:
    """
    Lazy singleton Redis client for the verification cache.
    decode_responses=True -> hash fields come back as str.
    """
    global _client
    if _client is None:
        url = get_settings().redis_url
        _client = Redis.from_url(url, encoding="utf-8", decode_responses=True)
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
