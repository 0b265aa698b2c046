"""
SMS Gateway
===========
Base class for authorization SMS delivery.
"""

from abc import ABC, abstractmethod
from typing import Optional

import structlog

from ..models import DeliveryResult, OperationContext

logger = structlog.get_logger(__name__)


class SmsGateway(ABC):
    """
    Abstract base class for SMS gateways.

    Returns DeliveryResult.FAILED when the provider rejects the message and
    raises RemoteDeliveryFailure when the provider cannot be reached.
    """

    name: str = "base"

    @abstractmethod
    async def send_authorization_sms(
        self,
        user_id: str,
        organization_id: Optional[str],
        message_id: str,
        message_text: str,
        operation_context: OperationContext,
    ) -> DeliveryResult:
        """
        Send an authorization SMS to the user.

        Args:
            user_id: Recipient user ID
            organization_id: Recipient organization
            message_id: ID of the issued challenge
            message_text: Rendered SMS text including the code
            operation_context: Operation being authorized

        Returns:
            Delivery outcome reported by the provider
        """


class LoggingSmsGateway(SmsGateway):
    """Sample gateway which only logs the delivery."""

    name = "logging"

    async def send_authorization_sms(
        self,
        user_id: str,
        organization_id: Optional[str],
        message_id: str,
        message_text: str,
        operation_context: OperationContext,
    ) -> DeliveryResult:
        logger.info(
            "Authorization SMS delivered",
            gateway=self.name,
            user_id=user_id,
            message_id=message_id,
            operation_id=operation_context.id,
        )
        return DeliveryResult.SUCCEEDED
