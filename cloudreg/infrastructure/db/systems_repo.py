from __future__ import annotations

from typing import Optional

from psycopg_pool import AsyncConnectionPool

from cloudreg.domain.entities import Activation, Product, System
from cloudreg.domain.ports.system_repository import SystemRepositoryPort


class PgSystemRepository(SystemRepositoryPort):
    """
    Read-only view over the registration database.

    Expected tables:
      systems(id, login, password_hash)
      products(id, identifier, version, arch)
      services(id, product_id, name)
      activations(id, system_id, service_id, status, created_at)
    """

    def __init__(self, pool: AsyncConnectionPool) -> None:
        self._pool = pool

    async def get_by_login_with_hash(
        self, login: str
    ) -> Optional[tuple[System, str]]:
        sql = """
        SELECT id, login, password_hash
        FROM systems
        WHERE login = %s
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (login,))
                row = await cur.fetchone()
        if not row:
            return None

        id_, db_login, db_password_hash = row
        return System(id=int(id_), login=str(db_login)), db_password_hash

    async def list_activations(self, system_id: int) -> list[Activation]:
        sql = """
        SELECT a.id, a.system_id, a.status,
               s.id, s.name,
               p.id, p.identifier, p.version, p.arch
        FROM activations a
        JOIN services s ON s.id = a.service_id
        JOIN products p ON p.id = s.product_id
        WHERE a.system_id = %s
        ORDER BY a.created_at, a.id
        """
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, (system_id,))
                rows = await cur.fetchall()

        activations: list[Activation] = []
        for r in rows or ():
            activations.append(
                Activation(
                    id=int(r[0]),
                    system_id=int(r[1]),
                    status=str(r[2]),
                    service_id=int(r[3]),
                    service_name=str(r[4]),
                    product=Product(
                        id=int(r[5]),
                        identifier=str(r[6]),
                        version=str(r[7]),
                        arch=str(r[8]),
                    ),
                )
            )
        return activations
