"""
OTP Lifecycle Engine
====================
Persists issued challenges and runs the verification state machine.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import structlog

from ..config import SmsAuthorizationConfig
from ..exceptions import ChallengeNotFound
from ..metrics import VERIFICATIONS
from ..models import (
    AuthorizationCode,
    AuthorizationError,
    AuthorizationResult,
    Challenge,
    OperationContext,
)
from ..persistence.base import ChallengeStore
from .digest import codes_match

logger = structlog.get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OtpLifecycleEngine:
    """Challenge issuance and verification against a challenge store."""

    def __init__(
        self,
        store: ChallengeStore,
        max_verify_attempts: int,
        otp_expiration_seconds: int,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.max_verify_attempts = max_verify_attempts
        self.ttl = timedelta(seconds=otp_expiration_seconds)
        self.clock = clock

    @classmethod
    def from_config(
        cls,
        store: ChallengeStore,
        config: SmsAuthorizationConfig,
        clock: Clock = utc_now,
    ) -> "OtpLifecycleEngine":
        return cls(
            store,
            max_verify_attempts=config.max_verify_attempts,
            otp_expiration_seconds=config.otp_expiration_seconds,
            clock=clock,
        )

    async def issue(
        self,
        message_id: str,
        operation_context: OperationContext,
        user_id: Optional[str],
        organization_id: Optional[str],
        authorization_code: AuthorizationCode,
        message_text: str,
    ) -> Challenge:
        """Persist a new pending challenge expiring ``ttl`` from now."""
        created_at = self.clock()
        challenge = Challenge(
            message_id=message_id,
            operation_id=operation_context.id,
            operation_name=operation_context.name,
            user_id=user_id,
            organization_id=organization_id,
            code=authorization_code.code,
            salt=authorization_code.salt,
            message_text=message_text,
            created_at=created_at,
            expires_at=created_at + self.ttl,
        )
        await self.store.create(challenge)

        logger.info(
            "SMS challenge created",
            message_id=message_id,
            operation_id=operation_context.id,
            expires_at=challenge.expires_at.isoformat(),
        )
        return challenge

    async def verify(
        self,
        message_id: str,
        code: str,
        allow_multiple_verifications: bool = False,
    ) -> AuthorizationResult:
        """
        Verify an authorization code.

        The checks run in a fixed order and each failure preempts the later
        ones. A missing challenge is reported without touching any counter;
        every other call consumes one attempt, even when the challenge is
        already expired or verified.

        Args:
            message_id: ID of the issued challenge
            code: Code supplied by the user
            allow_multiple_verifications: Accept a challenge already verified

        Returns:
            AuthorizationResult with the internal error kind
        """
        result = await self._verify(message_id, code, allow_multiple_verifications)
        outcome = result.error.value if result.error else result.status.value
        VERIFICATIONS.labels(outcome=outcome).inc()
        return result

    async def _verify(
        self,
        message_id: str,
        code: str,
        allow_multiple_verifications: bool,
    ) -> AuthorizationResult:
        try:
            challenge = await self.store.get(message_id)
            attempts = await self.store.increment_attempt_and_save(message_id)
        except ChallengeNotFound:
            logger.warning("SMS challenge not found", message_id=message_id)
            return AuthorizationResult.failure(AuthorizationError.INVALID_MESSAGE)

        remaining = self.max_verify_attempts - attempts
        now = self.clock()

        if not challenge.code:
            logger.warning("SMS challenge has no code", message_id=message_id)
            return AuthorizationResult.failure(AuthorizationError.INVALID_CODE, remaining)

        if challenge.is_expired(now):
            logger.warning("SMS challenge expired", message_id=message_id)
            return AuthorizationResult.failure(AuthorizationError.EXPIRED)

        if challenge.verified and not allow_multiple_verifications:
            logger.warning("SMS challenge already verified", message_id=message_id)
            return AuthorizationResult.failure(AuthorizationError.ALREADY_VERIFIED)

        if attempts > self.max_verify_attempts:
            logger.warning(
                "SMS challenge attempts exhausted",
                message_id=message_id,
                attempts=attempts,
            )
            return AuthorizationResult.failure(AuthorizationError.MAX_ATTEMPTS_EXCEEDED)

        if not codes_match(code or "", challenge.code):
            logger.warning(
                "Invalid SMS authorization code",
                message_id=message_id,
                remaining=max(remaining, 0),
            )
            return AuthorizationResult.failure(AuthorizationError.MISMATCH, remaining)

        first = await self.store.mark_verified(message_id, now)
        if not first and not allow_multiple_verifications:
            # A concurrent attempt won the first verification
            logger.warning("SMS challenge already verified", message_id=message_id)
            return AuthorizationResult.failure(AuthorizationError.ALREADY_VERIFIED)

        logger.info("SMS challenge verified", message_id=message_id)
        return AuthorizationResult.success(remaining)
