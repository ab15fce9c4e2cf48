from typing import Protocol

from cloudreg.domain.entities import (
    ScopeHint,
    VerificationKey,
    VerificationOutcome,
    VerificationRecord,
)


class VerificationCachePort(Protocol):
    async def lookup(self, key: VerificationKey) -> VerificationRecord | None:
        """
        Return the record for key, or None if missing or past its validity window.
        Backend failures raise VerificationCacheUnavailable.
        """

    async def store(
        self, key: VerificationKey, outcome: VerificationOutcome, scope_hint: ScopeHint
    ) -> None:
        """Replace the record for key. Only a Verified outcome may be stored."""

    async def invalidate(self, key: VerificationKey) -> None:
        """Drop the record so the next request re-verifies."""
