from __future__ import annotations

from typing import Protocol

from cloudreg.domain.entities import Activation, System


class SystemRepositoryPort(Protocol):
    async def get_by_login_with_hash(self, login: str) -> tuple[System, str] | None:
        """
        Fetch a registered system and its password hash.
        Return None if not found.
        """

    async def list_activations(self, system_id: int) -> list[Activation]:
        """Activations of the system, oldest first."""
