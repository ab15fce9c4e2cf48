from __future__ import annotations

from typing import Optional
from psycopg_pool import AsyncConnectionPool
from cloudreg.settings import get_settings

_pool: Optional[AsyncConnectionPool] = None


def get_pool() -> AsyncConnectionPool:
    """
    Create (if needed) and return the global pool of the systems database
    WITHOUT opening it. The app lifespan opens and closes it.
    """
    global _pool
    if _pool is None:
        _pool = AsyncConnectionPool(
            get_settings().database_url,
            min_size=1,
            max_size=10,
            timeout=5,
            open=False,
        )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
