"""
Account Status Gate
===================
Masks SMS issuance and verification for unknown or non-active accounts.

Callers see the same response shape whether or not the account exists, so
the SMS endpoints cannot be used to probe for usernames.
"""

import asyncio
import uuid
from typing import Optional

import structlog

from ..audit import AuditEventType, AuditTrail
from ..delivery.base import SmsGateway
from ..metrics import CHALLENGES_ISSUED, SMS_DELIVERY
from ..models import (
    AccountStatus,
    AuthorizationError,
    AuthorizationResult,
    AuthorizationStatus,
    DeliveryResult,
    IssuedChallenge,
    OperationContext,
)
from .engine import OtpLifecycleEngine
from .generator import CodeGenerator
from .messages import MessageRenderer

logger = structlog.get_logger(__name__)


def is_masked(user_id: Optional[str], account_status: AccountStatus) -> bool:
    return user_id is None or account_status != AccountStatus.ACTIVE


class AccountStatusGate:
    """Real or fake path selection in front of the lifecycle engine."""

    def __init__(
        self,
        engine: OtpLifecycleEngine,
        generator: CodeGenerator,
        renderer: MessageRenderer,
        gateway: SmsGateway,
        audit: Optional[AuditTrail] = None,
        masked_delay_seconds: float = 0.0,
    ):
        """
        Args:
            masked_delay_seconds: Pause on the masked issuance path, set to
                roughly the store write plus gateway round trip so both paths
                take similar time
        """
        self.engine = engine
        self.generator = generator
        self.renderer = renderer
        self.gateway = gateway
        self.audit = audit
        self.masked_delay_seconds = masked_delay_seconds

    async def issue(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        account_status: AccountStatus,
        operation_context: OperationContext,
        lang: Optional[str] = None,
    ) -> IssuedChallenge:
        """
        Issue an SMS challenge, or pretend to.

        Malformed operations raise the same errors on both paths. On the
        masked path the code is derived and discarded; nothing is stored
        or sent, and delivery is reported as succeeded.
        Without a store write or gateway call the masked path returns faster
        than the real one unless ``masked_delay_seconds`` is set.

        Raises:
            UnsupportedOperation: No extractor registered for the operation
            InvalidContext: Operation form data is missing or malformed
            StorageFailure: The challenge could not be persisted
            RemoteDeliveryFailure: The SMS gateway is unreachable
        """
        message_id = str(uuid.uuid4())
        fields = self.generator.registry.extract(operation_context)
        authorization_code = self.generator.derive(fields)

        if is_masked(user_id, account_status):
            CHALLENGES_ISSUED.labels(path="masked").inc()
            logger.info(
                "SMS delivery faked for inactive or unknown account",
                message_id=message_id,
                operation_id=operation_context.id,
            )
            if self.audit:
                self.audit.record(
                    AuditEventType.SMS_MASKED,
                    message_id=message_id,
                    payload={"operation_id": operation_context.id},
                )
            if self.masked_delay_seconds > 0:
                await asyncio.sleep(self.masked_delay_seconds)
            return IssuedChallenge(message_id=message_id, delivery_result=DeliveryResult.SUCCEEDED)

        message_text = self.renderer.render(
            fields.message_prefix,
            authorization_code.code,
            fields.message_args,
            lang,
        )
        challenge = await self.engine.issue(
            message_id=message_id,
            operation_context=operation_context,
            user_id=user_id,
            organization_id=organization_id,
            authorization_code=authorization_code,
            message_text=message_text,
        )
        CHALLENGES_ISSUED.labels(path="real").inc()

        delivery_result = await self.gateway.send_authorization_sms(
            user_id,
            organization_id,
            message_id,
            message_text,
            operation_context,
        )
        SMS_DELIVERY.labels(result=delivery_result.value).inc()
        if self.audit:
            self.audit.record(
                AuditEventType.SMS_CREATED,
                outcome=delivery_result.value,
                user_id=user_id,
                message_id=message_id,
                payload={
                    "operation_id": operation_context.id,
                    "operation_name": operation_context.name,
                    "salt": challenge.salt,
                    "expires_at": challenge.expires_at.isoformat(),
                },
            )
        return IssuedChallenge(message_id=message_id, delivery_result=delivery_result)

    async def verify(
        self,
        user_id: Optional[str],
        account_status: AccountStatus,
        message_id: str,
        code: str,
        allow_multiple_verifications: bool = False,
    ) -> AuthorizationResult:
        """Verify a code, skipping the store entirely for masked accounts."""
        if is_masked(user_id, account_status):
            logger.info("SMS verification skipped for inactive or unknown account", message_id=message_id)
            return AuthorizationResult(
                status=AuthorizationStatus.SKIPPED,
                error=AuthorizationError.AUTHENTICATION_FAILED,
            )
        return await self.engine.verify(message_id, code, allow_multiple_verifications)
