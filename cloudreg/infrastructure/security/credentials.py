from __future__ import annotations

from passlib.context import CryptContext

from cloudreg.settings import get_settings

# System credentials are stored as bcrypt hashes only.
_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_system_password(plain: str, *, rounds: int | None = None) -> str:
    """
    Hash a system password for storage. If rounds is None, use
    settings.bcrypt_rounds.
    """
    if rounds is None:
        rounds = int(get_settings().bcrypt_rounds)
    return _ctx.hash(plain, rounds=rounds)


def verify_system_password(plain: str, password_hash: str) -> bool:
    """Check a presented system password against its stored hash."""
    try:
        return _ctx.verify(plain, password_hash)
    except ValueError:
        # unrecognized or corrupt hash in the database
        return False
