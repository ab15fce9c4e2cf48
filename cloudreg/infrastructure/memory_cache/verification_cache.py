from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

from cloudreg.domain.entities import (
    ScopeHint,
    Verified,
    VerificationKey,
    VerificationOutcome,
    VerificationRecord,
)
from cloudreg.domain.ports.verification_cache import VerificationCachePort


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryVerificationCache(VerificationCachePort):
    """
    Process-local cache for single-worker deployments and tests.

    Records are immutable and swapped in with a single dict assignment, so
    there is nothing to lock: a reader gets either the old or the new record.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int,
        registry_ttl_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._records: dict[VerificationKey, VerificationRecord] = {}
        self._window = timedelta(seconds=ttl_seconds)
        self._registry_window = timedelta(seconds=registry_ttl_seconds)
        self._clock = clock

    async def lookup(self, key: VerificationKey) -> VerificationRecord | None:
        record = self._records.get(key)
        if record is None:
            return None
        window = self._registry_window if record.registry_scoped else self._window
        if not record.is_fresh(self._clock(), window):
            return None
        return record

    async def store(
        self, key: VerificationKey, outcome: VerificationOutcome, scope_hint: ScopeHint
    ) -> None:
        if not isinstance(outcome, Verified):
            raise ValueError("only a verified outcome can be cached")
        self._records[key] = VerificationRecord(
            key=key,
            verified_at=self._clock(),
            billing_account_id=outcome.billing_account_id,
            registry_scoped=scope_hint is ScopeHint.REGISTRY,
        )

    async def invalidate(self, key: VerificationKey) -> None:
        self._records.pop(key, None)
