from __future__ import annotations

import asyncio
from pathlib import Path

from cloudreg.domain.entities import VerificationKey
from cloudreg.domain.ports.repository_artifacts import RepositoryArtifactPort


class FileSystemArtifactProbe(RepositoryArtifactPort):
    """
    A repository listing is materialized as <root>/<address>-<login>-<product_id>
    by the listing collaborator. We only ever look, never write.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def path_for(self, key: VerificationKey) -> Path:
        return self._root / key.cache_name

    async def exists(self, key: VerificationKey) -> bool:
        return await asyncio.to_thread(self.path_for(key).is_file)
