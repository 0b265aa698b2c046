"""
Multi-Factor Aggregator
=======================
Combines SMS code and password verification into one decision.
"""

from dataclasses import replace
from typing import Optional

import structlog

from ..credentials.authenticator import PasswordAuthenticator
from ..metrics import COMBINED_VERIFICATIONS
from ..models import (
    AccountStatus,
    AuthenticationContext,
    AuthorizationError,
    AuthorizationStatus,
    CombinedResult,
)
from .gate import AccountStatusGate

logger = structlog.get_logger(__name__)


def _min_remaining(*counts: Optional[int]) -> Optional[int]:
    known = [count for count in counts if count is not None]
    return min(known) if known else None


class MultiFactorAggregator:
    """
    SMS code plus password verification.

    Both factors are always checked, in the same order, and a failure never
    says which factor failed.
    """

    def __init__(self, gate: AccountStatusGate, authenticator: PasswordAuthenticator):
        self.gate = gate
        self.authenticator = authenticator

    async def verify_combined(
        self,
        message_id: str,
        code: str,
        user_id: Optional[str],
        password: str,
        context: AuthenticationContext,
        account_status: AccountStatus,
    ) -> CombinedResult:
        # The password step reuses the SMS check, so replays are allowed here
        sms_result = await self.gate.verify(
            user_id,
            account_status,
            message_id,
            code,
            allow_multiple_verifications=True,
        )

        password_context = replace(context, sms_authorization_result=sms_result.status)
        password_result = await self.authenticator.authenticate(user_id, password, password_context)

        if sms_result.succeeded and password_result.succeeded:
            COMBINED_VERIFICATIONS.labels(outcome="succeeded").inc()
            logger.info("Combined SMS and password verification succeeded", message_id=message_id)
            return CombinedResult(status=AuthorizationStatus.SUCCEEDED)

        COMBINED_VERIFICATIONS.labels(outcome="failed").inc()
        logger.info("Combined SMS and password verification failed", message_id=message_id)
        return CombinedResult(
            status=AuthorizationStatus.FAILED,
            error=AuthorizationError.AUTHENTICATION_FAILED,
            remaining_attempts=_min_remaining(
                sms_result.remaining_attempts,
                password_result.remaining_attempts,
            ),
        )
