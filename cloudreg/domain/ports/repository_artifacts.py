from typing import Protocol

from cloudreg.domain.entities import VerificationKey


class RepositoryArtifactPort(Protocol):
    async def exists(self, key: VerificationKey) -> bool:
        """True if a repository listing is already materialized for key."""
