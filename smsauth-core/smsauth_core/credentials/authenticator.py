"""
Password Authentication
=======================
Password authentication backends used by combined SMS and password checks.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog

from ..models import AuthenticationContext, PasswordProtection
from .hashing import hash_password, verify_password

logger = structlog.get_logger(__name__)

CredentialLookup = Callable[[str], Awaitable[Optional[str]]]


class PasswordAuthenticationResult(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PasswordAuthentication:
    """Outcome of a password check."""
    result: PasswordAuthenticationResult
    remaining_attempts: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.result == PasswordAuthenticationResult.SUCCEEDED


class PasswordAuthenticator(ABC):
    """Abstract base class for password authentication backends."""

    @abstractmethod
    async def authenticate(
        self,
        user_id: Optional[str],
        password: str,
        context: AuthenticationContext,
    ) -> PasswordAuthentication:
        """Check a user's password."""


class HashedPasswordAuthenticator(PasswordAuthenticator):
    """
    Authenticates against stored Argon2id or bcrypt hashes.

    Unknown users are checked against a dummy hash so the response time
    does not reveal whether the user exists. Encrypted passwords are
    rejected; decrypting them is the banking backend's job.
    """

    def __init__(self, credential_lookup: CredentialLookup):
        """
        Args:
            credential_lookup: Coroutine returning the password hash of a user, or None
        """
        self.credential_lookup = credential_lookup
        self._dummy_hash: Optional[str] = None

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = hash_password("dummy-password-for-timing")
        return self._dummy_hash

    async def authenticate(
        self,
        user_id: Optional[str],
        password: str,
        context: AuthenticationContext,
    ) -> PasswordAuthentication:
        if context.password_protection != PasswordProtection.NO_PROTECTION:
            logger.warning(
                "Unsupported password protection",
                user_id=user_id,
                protection=context.password_protection.value,
            )
            return PasswordAuthentication(PasswordAuthenticationResult.FAILED)

        stored_hash = await self.credential_lookup(user_id) if user_id else None
        valid = await verify_password(password, stored_hash or self._get_dummy_hash())

        if valid and stored_hash:
            return PasswordAuthentication(PasswordAuthenticationResult.SUCCEEDED)

        logger.info("Password authentication failed", user_id=user_id)
        return PasswordAuthentication(PasswordAuthenticationResult.FAILED)
