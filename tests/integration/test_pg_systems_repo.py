from uuid import uuid4

from cloudreg.infrastructure.db.systems_repo import PgSystemRepository
from cloudreg.infrastructure.security.credentials import (
    hash_system_password,
    verify_system_password,
)


async def test_systems_repo_reads_system_and_activations(pg_pool):
    login = f"SCC_{uuid4().hex[:12]}"
    password_hash = hash_system_password("s3cret", rounds=4)

    async with pg_pool.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute(
                    "INSERT INTO products (id, identifier, version, arch) "
                    "VALUES (1575, 'SLES', '15.5', 'x86_64') ON CONFLICT DO NOTHING;"
                )
                await cur.execute(
                    "INSERT INTO services (id, product_id, name) "
                    "VALUES (42, 1575, 'SUSE_Linux_Enterprise_Server_x86_64') "
                    "ON CONFLICT DO NOTHING;"
                )
                await cur.execute(
                    "INSERT INTO systems (login, password_hash) VALUES (%s, %s) "
                    "RETURNING id;",
                    (login, password_hash),
                )
                (system_id,) = await cur.fetchone()
                await cur.execute(
                    "INSERT INTO activations (system_id, service_id) VALUES (%s, 42);",
                    (system_id,),
                )

    repo = PgSystemRepository(pg_pool)
    try:
        got = await repo.get_by_login_with_hash(login)
        assert got is not None
        system, stored_hash = got
        assert system.id == system_id
        assert system.login == login
        assert verify_system_password("s3cret", stored_hash)

        activations = await repo.list_activations(system_id)
        assert len(activations) == 1
        assert activations[0].service_id == 42
        assert activations[0].service_name == "SUSE_Linux_Enterprise_Server_x86_64"
        assert activations[0].product.id == 1575
        assert activations[0].status == "ACTIVE"

        assert await repo.get_by_login_with_hash("nobody-" + login) is None
    finally:
        async with pg_pool.connection() as conn:
            await conn.execute("DELETE FROM systems WHERE id = %s;", (system_id,))
            await conn.commit()
