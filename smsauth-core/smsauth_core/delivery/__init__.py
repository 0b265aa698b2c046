"""
SMS Delivery
============
Gateways delivering authorization SMS messages.
"""

from .base import SmsGateway, LoggingSmsGateway
from .twilio import TwilioSmsGateway

__all__ = [
    "SmsGateway",
    "LoggingSmsGateway",
    "TwilioSmsGateway",
]
