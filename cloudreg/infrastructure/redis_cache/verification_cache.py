from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from redis.asyncio import Redis
from redis.exceptions import RedisError

from cloudreg.domain.entities import (
    ScopeHint,
    Verified,
    VerificationKey,
    VerificationOutcome,
    VerificationRecord,
)
from cloudreg.domain.errors import VerificationCacheUnavailable
from cloudreg.domain.ports.verification_cache import VerificationCachePort


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RedisVerificationCache(VerificationCachePort):
    """
    One hash per verification key:

        ivc:<address>-<login>-<product_id>
            verified_at         ISO-8601 UTC
            registry_scoped     "1" | "0"
            billing_account_id  optional

    Writes replace the whole hash inside MULTI/EXEC, so concurrent writers
    for the same key are last-write-wins and readers never observe a mix of
    two records. The key TTL mirrors the validity window; lookup re-checks
    verified_at in case the TTL was extended out of band.
    """

    def __init__(
        self,
        redis: Redis,
        *,
        ttl_seconds: int,
        registry_ttl_seconds: int,
        key_prefix: str = "ivc:",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._redis = redis
        self._ttl = ttl_seconds
        self._registry_ttl = registry_ttl_seconds
        self._prefix = key_prefix
        self._clock = clock

    def _key(self, key: VerificationKey) -> str:
        return f"{self._prefix}{key.cache_name}"

    def _ttl_for(self, registry_scoped: bool) -> int:
        return self._registry_ttl if registry_scoped else self._ttl

    async def lookup(self, key: VerificationKey) -> VerificationRecord | None:
        try:
            stored = await self._redis.hgetall(self._key(key))
        except RedisError as e:
            raise VerificationCacheUnavailable(f"redis lookup failed: {e}") from e
        if not stored or "verified_at" not in stored:
            return None
        try:
            verified_at = datetime.fromisoformat(stored["verified_at"])
        except ValueError:
            return None

        record = VerificationRecord(
            key=key,
            verified_at=verified_at,
            billing_account_id=stored.get("billing_account_id") or None,
            registry_scoped=stored.get("registry_scoped") == "1",
        )
        window = timedelta(seconds=self._ttl_for(record.registry_scoped))
        if not record.is_fresh(self._clock(), window):
            return None
        return record

    async def store(
        self, key: VerificationKey, outcome: VerificationOutcome, scope_hint: ScopeHint
    ) -> None:
        if not isinstance(outcome, Verified):
            raise ValueError("only a verified outcome can be cached")

        registry_scoped = scope_hint is ScopeHint.REGISTRY
        mapping = {
            "verified_at": self._clock().isoformat(),
            "registry_scoped": "1" if registry_scoped else "0",
        }
        if outcome.billing_account_id:
            mapping["billing_account_id"] = outcome.billing_account_id

        redis_key = self._key(key)
        pipe = self._redis.pipeline(transaction=True)
        pipe.delete(redis_key)
        pipe.hset(redis_key, mapping=mapping)
        pipe.expire(redis_key, self._ttl_for(registry_scoped))
        try:
            await pipe.execute()
        except RedisError as e:
            raise VerificationCacheUnavailable(f"redis store failed: {e}") from e

    async def invalidate(self, key: VerificationKey) -> None:
        try:
            await self._redis.delete(self._key(key))
        except RedisError as e:
            raise VerificationCacheUnavailable(f"redis delete failed: {e}") from e
