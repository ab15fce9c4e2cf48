# tests/integration/conftest.py
import os

import psycopg
import pytest
import pytest_asyncio
from psycopg_pool import AsyncConnectionPool
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

REDIS_URL = os.environ.get("REDIS_URL", "redis://redis:6379/0")
DATABASE_URL = os.environ.get("DATABASE_URL", "postgresql://rmt:rmt@db:5432/rmt")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS systems (
  id            bigserial PRIMARY KEY,
  login         text NOT NULL UNIQUE,
  password_hash text NOT NULL
);
CREATE TABLE IF NOT EXISTS products (
  id         bigint PRIMARY KEY,
  identifier text NOT NULL,
  version    text NOT NULL,
  arch       text NOT NULL
);
CREATE TABLE IF NOT EXISTS services (
  id         bigint PRIMARY KEY,
  product_id bigint NOT NULL REFERENCES products(id),
  name       text NOT NULL
);
CREATE TABLE IF NOT EXISTS activations (
  id         bigserial PRIMARY KEY,
  system_id  bigint NOT NULL REFERENCES systems(id) ON DELETE CASCADE,
  service_id bigint NOT NULL REFERENCES services(id),
  status     text NOT NULL DEFAULT 'ACTIVE',
  created_at timestamptz NOT NULL DEFAULT now()
);
"""


@pytest_asyncio.fixture
async def redis_client():
    r = Redis.from_url(REDIS_URL, encoding="utf-8", decode_responses=True)
    try:
        await r.ping()
    except (RedisConnectionError, RedisTimeoutError, OSError):
        await r.aclose()
        pytest.skip(f"redis not reachable at {REDIS_URL}")
    try:
        yield r
    finally:
        await r.aclose()


@pytest_asyncio.fixture
async def pg_pool():
    try:
        async with await psycopg.AsyncConnection.connect(
            DATABASE_URL, connect_timeout=2, autocommit=True
        ) as conn:
            await conn.execute(SCHEMA_SQL)
    except psycopg.OperationalError:
        pytest.skip(f"postgres not reachable at {DATABASE_URL}")

    pool = AsyncConnectionPool(DATABASE_URL, min_size=1, max_size=2, open=False)
    await pool.open()
    try:
        yield pool
    finally:
        await pool.close()
