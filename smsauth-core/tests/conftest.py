"""
Shared fixtures for smsauth-core tests.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional

import pytest

from smsauth_core.delivery.base import SmsGateway
from smsauth_core.models import (
    Amount,
    DeliveryResult,
    FormData,
    OperationContext,
)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class RecordingGateway(SmsGateway):
    """Gateway capturing sent messages instead of delivering them."""

    name = "recording"

    def __init__(self, result: DeliveryResult = DeliveryResult.SUCCEEDED):
        self.result = result
        self.sent: List[dict] = []

    async def send_authorization_sms(
        self, user_id, organization_id, message_id, message_text, operation_context
    ) -> DeliveryResult:
        self.sent.append({
            "user_id": user_id,
            "organization_id": organization_id,
            "message_id": message_id,
            "message_text": message_text,
            "operation_id": operation_context.id,
        })
        return self.result


def make_login_context(operation_id: str = "op-login-1") -> OperationContext:
    return OperationContext(id=operation_id, name="login")


def make_payment_context(
    operation_id: str = "op-pay-1",
    amount: str = "100.00",
    currency: str = "EUR",
    account: Optional[str] = "CZ6508000000192000145399",
) -> OperationContext:
    attributes = {"operation.account": account} if account is not None else {}
    return OperationContext(
        id=operation_id,
        name="authorize_payment",
        form_data=FormData(
            amount=Amount(amount=Decimal(amount), currency=currency),
            attributes=attributes,
        ),
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store():
    from smsauth_core.persistence.memory import InMemoryChallengeStore

    return InMemoryChallengeStore()


@pytest.fixture
def engine(store, clock):
    from smsauth_core.authorization.engine import OtpLifecycleEngine

    return OtpLifecycleEngine(
        store,
        max_verify_attempts=5,
        otp_expiration_seconds=300,
        clock=clock,
    )


@pytest.fixture
def generator():
    from smsauth_core.authorization.generator import CodeGenerator

    return CodeGenerator()


@pytest.fixture
def gateway() -> RecordingGateway:
    return RecordingGateway()


@pytest.fixture
def audit():
    from smsauth_core.audit import AuditTrail

    return AuditTrail("smsauth-test")


@pytest.fixture
def gate(engine, generator, gateway, audit):
    from smsauth_core.authorization.gate import AccountStatusGate
    from smsauth_core.authorization.messages import MessageRenderer

    return AccountStatusGate(
        engine=engine,
        generator=generator,
        renderer=MessageRenderer(),
        gateway=gateway,
        audit=audit,
    )
