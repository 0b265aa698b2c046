"""
Credentials
===========
Password hashing and password authentication backends.
"""

from .hashing import hash_password, verify_password, verify_password_sync
from .authenticator import (
    PasswordAuthenticationResult,
    PasswordAuthentication,
    PasswordAuthenticator,
    HashedPasswordAuthenticator,
)

__all__ = [
    # Hashing
    "hash_password",
    "verify_password",
    "verify_password_sync",
    # Authentication
    "PasswordAuthenticationResult",
    "PasswordAuthentication",
    "PasswordAuthenticator",
    "HashedPasswordAuthenticator",
]
