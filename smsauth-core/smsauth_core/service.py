"""
SMS Authorization Service
=========================
Entry point used by authentication flows: user lookup, password
authentication, SMS issuance and SMS verification.

Usage:
    from smsauth_core import SmsAuthorizationConfig, create_service

    service = await create_service(
        SmsAuthorizationConfig(),
        gateway=LoggingSmsGateway(),
        directory=directory,
        authenticator=authenticator,
    )
    issued = await service.create_and_send_authorization_sms(
        user_id, organization_id, operation_context, lang="en"
    )
"""

from typing import Mapping, Optional

import structlog

from .accounts import AccountDirectory
from .audit import AuditEventType, AuditTrail
from .authorization.aggregator import MultiFactorAggregator
from .authorization.engine import Clock, OtpLifecycleEngine, utc_now
from .authorization.extractors import OperationRegistry
from .authorization.gate import AccountStatusGate
from .authorization.generator import CodeGenerator
from .authorization.messages import MessageRenderer
from .config import SmsAuthorizationConfig
from .credentials.authenticator import PasswordAuthentication, PasswordAuthenticator
from .database import create_async_engine, get_session_factory, init_models
from .delivery.base import SmsGateway
from .logging_config import bind_operation
from .models import (
    AccountStatus,
    AuthenticationContext,
    AuthorizationResult,
    CombinedResult,
    IssuedChallenge,
    OperationContext,
    UserDetail,
)
from .persistence.base import ChallengeStore
from .persistence.sql import SqlAlchemyChallengeStore

logger = structlog.get_logger(__name__)


class SmsAuthorizationService:
    """
    SMS authorization facade.

    Verification results leave this class in their public form: callers
    learn whether a check succeeded and how many attempts remain, never why
    it failed.
    """

    def __init__(
        self,
        gate: AccountStatusGate,
        aggregator: MultiFactorAggregator,
        directory: AccountDirectory,
        authenticator: PasswordAuthenticator,
        audit: AuditTrail,
    ):
        self.gate = gate
        self.aggregator = aggregator
        self.directory = directory
        self.authenticator = authenticator
        self.audit = audit

    @classmethod
    def build(
        cls,
        config: SmsAuthorizationConfig,
        store: ChallengeStore,
        gateway: SmsGateway,
        directory: AccountDirectory,
        authenticator: PasswordAuthenticator,
        clock: Clock = utc_now,
        registry: Optional[OperationRegistry] = None,
        templates: Optional[Mapping[str, Mapping[str, str]]] = None,
    ) -> "SmsAuthorizationService":
        """Wire all components from configuration."""
        audit = AuditTrail(config.service_name)
        engine = OtpLifecycleEngine.from_config(store, config, clock)
        gate = AccountStatusGate(
            engine=engine,
            generator=CodeGenerator(registry, code_length=config.code_length),
            renderer=MessageRenderer(templates, default_language=config.default_language),
            gateway=gateway,
            audit=audit,
            masked_delay_seconds=config.masked_delay_ms / 1000,
        )
        return cls(
            gate=gate,
            aggregator=MultiFactorAggregator(gate, authenticator),
            directory=directory,
            authenticator=authenticator,
            audit=audit,
        )

    async def _resolve_status(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        account_status: Optional[AccountStatus],
    ) -> AccountStatus:
        if account_status is not None:
            return account_status
        return await self.directory.account_status(user_id, organization_id)

    async def lookup_user(self, username: str, organization_id: Optional[str]) -> UserDetail:
        """Find a user; unknown or blocked users come back with ``id=None``."""
        return await self.directory.lookup_user(username, organization_id)

    async def authenticate_user(
        self,
        user_id: Optional[str],
        password: str,
        auth_context: Optional[AuthenticationContext] = None,
    ) -> PasswordAuthentication:
        """Password-only authentication."""
        return await self.authenticator.authenticate(
            user_id, password, auth_context or AuthenticationContext()
        )

    async def create_and_send_authorization_sms(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        operation_context: OperationContext,
        lang: Optional[str] = None,
        account_status: Optional[AccountStatus] = None,
    ) -> IssuedChallenge:
        """
        Create an SMS challenge for an operation and deliver it.

        Args:
            user_id: User ID, None for unknown users
            organization_id: Organization of the user
            operation_context: Operation being authorized
            lang: Language of the SMS text
            account_status: Known account status; looked up when omitted

        Returns:
            IssuedChallenge with the message ID to verify against

        Raises:
            UnsupportedOperation: No extractor registered for the operation
            InvalidContext: Operation form data is missing or malformed
            StorageFailure: The challenge could not be persisted
            RemoteDeliveryFailure: The SMS gateway is unreachable
        """
        with bind_operation(operation_id=operation_context.id, operation_name=operation_context.name):
            status = await self._resolve_status(user_id, organization_id, account_status)
            return await self.gate.issue(
                user_id,
                organization_id,
                status,
                operation_context,
                lang=lang,
            )

    async def verify_authorization_sms(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        message_id: str,
        code: str,
        operation_context: OperationContext,
        account_status: Optional[AccountStatus] = None,
    ) -> AuthorizationResult:
        """Verify an SMS authorization code."""
        with bind_operation(operation_id=operation_context.id, operation_name=operation_context.name):
            status = await self._resolve_status(user_id, organization_id, account_status)
            result = await self.gate.verify(user_id, status, message_id, code)

            self.audit.record(
                AuditEventType.SMS_VERIFIED if result.succeeded else AuditEventType.SMS_VERIFY_FAILED,
                outcome=result.status.value,
                user_id=user_id,
                message_id=message_id,
                payload={
                    "operation_id": operation_context.id,
                    "error": result.error.value if result.error else None,
                },
            )
            return result.to_public()

    async def verify_authorization_sms_and_password(
        self,
        user_id: Optional[str],
        organization_id: Optional[str],
        message_id: str,
        code: str,
        password: str,
        operation_context: OperationContext,
        auth_context: Optional[AuthenticationContext] = None,
        account_status: Optional[AccountStatus] = None,
    ) -> CombinedResult:
        """Verify an SMS authorization code together with the user's password."""
        with bind_operation(operation_id=operation_context.id, operation_name=operation_context.name):
            status = await self._resolve_status(user_id, organization_id, account_status)
            result = await self.aggregator.verify_combined(
                message_id,
                code,
                user_id,
                password,
                auth_context or AuthenticationContext(),
                status,
            )

            self.audit.record(
                AuditEventType.AUTH_COMBINED,
                outcome=result.status.value,
                user_id=user_id,
                message_id=message_id,
                payload={"operation_id": operation_context.id},
            )
            return result


async def create_service(
    config: SmsAuthorizationConfig,
    gateway: SmsGateway,
    directory: AccountDirectory,
    authenticator: PasswordAuthenticator,
    clock: Clock = utc_now,
) -> SmsAuthorizationService:
    """
    Build a service on the SQL challenge store configured by ``database_url``.

    Creates the database engine and any missing tables.
    """
    create_async_engine(config.database_url)
    await init_models()
    store = SqlAlchemyChallengeStore(get_session_factory())

    logger.info("SMS authorization service ready", service=config.service_name)
    return SmsAuthorizationService.build(
        config,
        store=store,
        gateway=gateway,
        directory=directory,
        authenticator=authenticator,
        clock=clock,
    )
