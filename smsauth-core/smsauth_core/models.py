"""
Authorization Models
====================
Data models and enums for SMS OTP challenges and verification outcomes.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional


class AuthorizationStatus(str, Enum):
    """Outcome of a verification step."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class AuthorizationError(str, Enum):
    """Closed set of verification error kinds."""
    INVALID_MESSAGE = "invalid-message"
    INVALID_CODE = "invalid-code"
    EXPIRED = "expired"
    ALREADY_VERIFIED = "already-verified"
    MAX_ATTEMPTS_EXCEEDED = "max-attempts-exceeded"
    MISMATCH = "mismatch"
    AUTHENTICATION_FAILED = "authentication-failed"


class ChallengeState(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    EXHAUSTED = "exhausted"
    EXPIRED = "expired"


class AccountStatus(str, Enum):
    ACTIVE = "active"
    NOT_ACTIVE = "not_active"
    UNKNOWN = "unknown"


class DeliveryResult(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class PasswordProtection(str, Enum):
    NO_PROTECTION = "no_protection"
    PASSWORD_ENCRYPTION_AES = "password_encryption_aes"


@dataclass(frozen=True)
class Amount:
    """Payment amount with ISO 4217 currency code."""
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class FormData:
    """Operation form data relevant for authorization."""
    amount: Optional[Amount] = None
    attributes: Dict[str, str] = field(default_factory=dict)

    def get_attribute(self, attribute_id: str) -> Optional[str]:
        return self.attributes.get(attribute_id)


@dataclass(frozen=True)
class OperationContext:
    """The operation an SMS challenge authorizes."""
    id: str
    name: str
    form_data: Optional[FormData] = None


@dataclass(frozen=True)
class AuthorizationCode:
    """Code delivered to the user and the salt it was derived with."""
    code: str
    salt: str


@dataclass(frozen=True)
class Challenge:
    """A single issued SMS OTP, one row per issuance."""
    message_id: str
    operation_id: str
    operation_name: str
    user_id: Optional[str]
    organization_id: Optional[str]
    code: str
    salt: str
    message_text: str
    created_at: datetime
    expires_at: datetime
    verify_attempt_count: int = 0
    verified: bool = False
    verified_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def state(self, now: datetime, max_attempts: int) -> ChallengeState:
        """Lifecycle state at ``now``; expiry is derived, not stored."""
        if self.verified:
            return ChallengeState.VERIFIED
        if self.is_expired(now):
            return ChallengeState.EXPIRED
        if self.verify_attempt_count >= max_attempts:
            return ChallengeState.EXHAUSTED
        return ChallengeState.PENDING

    def with_attempts(self, count: int) -> "Challenge":
        return replace(self, verify_attempt_count=count)


@dataclass(frozen=True)
class AuthorizationResult:
    """Result of an SMS authorization code verification."""
    status: AuthorizationStatus
    error: Optional[AuthorizationError] = None
    remaining_attempts: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AuthorizationStatus.SUCCEEDED

    @classmethod
    def success(cls, remaining_attempts: Optional[int] = None) -> "AuthorizationResult":
        if remaining_attempts is not None:
            remaining_attempts = max(remaining_attempts, 0)
        return cls(status=AuthorizationStatus.SUCCEEDED, remaining_attempts=remaining_attempts)

    @classmethod
    def failure(
        cls,
        error: AuthorizationError,
        remaining_attempts: Optional[int] = None,
    ) -> "AuthorizationResult":
        if remaining_attempts is not None:
            remaining_attempts = max(remaining_attempts, 0)
        return cls(
            status=AuthorizationStatus.FAILED,
            error=error,
            remaining_attempts=remaining_attempts,
        )

    def to_public(self) -> "AuthorizationResult":
        """Collapse the failure reason for external callers.

        Only the remaining attempts counter survives. Skipped checks of masked
        accounts are reported as plain failures.
        """
        if self.succeeded:
            return self
        return replace(
            self,
            status=AuthorizationStatus.FAILED,
            error=AuthorizationError.AUTHENTICATION_FAILED,
        )


@dataclass(frozen=True)
class CombinedResult:
    """Aggregated OTP and password verification outcome."""
    status: AuthorizationStatus
    error: Optional[AuthorizationError] = None
    remaining_attempts: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AuthorizationStatus.SUCCEEDED


@dataclass(frozen=True)
class AuthenticationContext:
    """Context of a password authentication request."""
    password_protection: PasswordProtection = PasswordProtection.NO_PROTECTION
    cipher_transformation: Optional[str] = None
    sms_authorization_result: Optional[AuthorizationStatus] = None


@dataclass(frozen=True)
class IssuedChallenge:
    """What the caller learns about an issuance, real or masked."""
    message_id: str
    delivery_result: DeliveryResult


@dataclass(frozen=True)
class UserDetail:
    """User details; ``id`` is None for silently masked users."""
    id: Optional[str]
    organization_id: Optional[str]
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    account_status: AccountStatus = AccountStatus.UNKNOWN
