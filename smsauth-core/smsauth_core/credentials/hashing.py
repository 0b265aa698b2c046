"""
Password Hashing
================
Argon2id password hashing with legacy bcrypt verification.

Verification runs in the default executor so it never blocks the event loop.
"""

import asyncio
from functools import lru_cache

import bcrypt
from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHashError, VerificationError

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


@lru_cache(maxsize=1)
def get_hasher() -> PasswordHasher:
    """Argon2id hasher with production settings."""
    return PasswordHasher(
        time_cost=3,
        memory_cost=65536,  # 64MB
        parallelism=4,
        hash_len=32,
        salt_len=16,
        type=Type.ID,
    )


def hash_password(password: str) -> str:
    """Hash a password with Argon2id."""
    if not password:
        raise ValueError("Password cannot be empty")
    return get_hasher().hash(password)


def verify_password_sync(password: str, password_hash: str) -> bool:
    """
    Verify a password against an Argon2id or bcrypt hash.

    Unknown hash formats never verify.
    """
    if not password or not password_hash:
        return False

    if password_hash.startswith("$argon2"):
        try:
            return get_hasher().verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False

    if password_hash.startswith(_BCRYPT_PREFIXES):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            return False

    return False


async def verify_password(password: str, password_hash: str) -> bool:
    """Async wrapper around verify_password_sync."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, verify_password_sync, password, password_hash)
