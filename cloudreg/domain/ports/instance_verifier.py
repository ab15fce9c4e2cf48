from __future__ import annotations

from typing import Any, Protocol

from cloudreg.domain.entities import CloudProvider, VerificationOutcome


class ProviderPort(Protocol):
    """One cloud vendor's verification capability."""

    tag: CloudProvider
    verify_url: str

    def prepare(self, document: str) -> dict[str, Any]:
        """
        Decode the opaque instance document into the request payload sent to
        verify_url. Raises MalformedInstanceDocument if it cannot be decoded.
        """


class InstanceVerifierPort(Protocol):
    async def verify(
        self,
        provider: CloudProvider,
        source_address: str,
        document: str | None,
    ) -> VerificationOutcome:
        """
        Perform at most one outbound verification call and normalize the
        answer. Never raises for provider or network problems.
        """
