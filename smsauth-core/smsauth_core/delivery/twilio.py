"""
Twilio SMS Gateway
==================
Delivers authorization SMS messages through the Twilio Messages API.
"""

from base64 import b64encode
from typing import Awaitable, Callable, Optional

import httpx
import structlog

from ..models import DeliveryResult, OperationContext
from ..exceptions import RemoteDeliveryFailure
from .base import SmsGateway

logger = structlog.get_logger(__name__)

PhoneLookup = Callable[[str, Optional[str]], Awaitable[Optional[str]]]


class TwilioSmsGateway(SmsGateway):
    """
    Twilio SMS gateway.

    Resolves the recipient phone number through ``phone_lookup`` and posts
    the message; the code itself never appears in logs.
    """

    name = "twilio"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        phone_lookup: PhoneLookup,
        from_number: Optional[str] = None,
        messaging_service_sid: Optional[str] = None,
        base_url: str = "https://api.twilio.com/2010-04-01",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not from_number and not messaging_service_sid:
            raise ValueError("Either from_number or messaging_service_sid is required")
        self.account_sid = account_sid
        self.phone_lookup = phone_lookup
        self.from_number = from_number
        self.messaging_service_sid = messaging_service_sid
        self.messages_url = f"{base_url}/Accounts/{account_sid}/Messages.json"

        auth = b64encode(f"{account_sid}:{auth_token}".encode()).decode()
        self._client = httpx.AsyncClient(
            headers={"Authorization": f"Basic {auth}"},
            timeout=timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()

    async def send_authorization_sms(
        self,
        user_id: str,
        organization_id: Optional[str],
        message_id: str,
        message_text: str,
        operation_context: OperationContext,
    ) -> DeliveryResult:
        phone = await self.phone_lookup(user_id, organization_id)
        if not phone:
            logger.warning("No phone number for user", user_id=user_id, message_id=message_id)
            return DeliveryResult.FAILED

        payload = {"To": phone, "Body": message_text}
        if self.messaging_service_sid:
            payload["MessagingServiceSid"] = self.messaging_service_sid
        else:
            payload["From"] = self.from_number

        try:
            response = await self._client.post(self.messages_url, data=payload)
        except httpx.HTTPError as e:
            logger.error("Twilio send failed", message_id=message_id, error=str(e))
            raise RemoteDeliveryFailure("SMS gateway unavailable", e)

        if response.status_code == 201:
            logger.info(
                "Authorization SMS sent",
                gateway=self.name,
                message_id=message_id,
                provider_message_id=response.json().get("sid"),
            )
            return DeliveryResult.SUCCEEDED

        logger.warning(
            "Twilio rejected authorization SMS",
            message_id=message_id,
            status_code=response.status_code,
        )
        return DeliveryResult.FAILED
