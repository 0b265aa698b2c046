"""
SMS Authorization Exceptions
============================
Exception classes raised by the SMS authorization core.

Verification outcomes (wrong code, expired challenge, ...) are never raised;
they travel inside AuthorizationResult. Only caller errors and infrastructure
failures are exceptions.
"""

from typing import Optional


class SmsAuthorizationError(Exception):
    """Base class for all SMS authorization errors."""
    pass


class UnsupportedOperation(SmsAuthorizationError):
    """Raised when no digest extractor is registered for an operation name."""

    def __init__(self, operation_name: str):
        super().__init__(f"Unsupported operation: {operation_name}")
        self.operation_name = operation_name


class InvalidContext(SmsAuthorizationError):
    """Raised when operation form data is missing or malformed."""
    pass


class ChallengeNotFound(SmsAuthorizationError):
    """Raised by a challenge store when the message ID does not exist."""

    def __init__(self, message_id: str):
        super().__init__(f"Challenge not found: {message_id}")
        self.message_id = message_id


class StorageFailure(SmsAuthorizationError):
    """Raised when the challenge store backend fails."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class RemoteDeliveryFailure(SmsAuthorizationError):
    """Raised when the SMS gateway cannot be reached."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class ConfigurationError(SmsAuthorizationError):
    """Raised for invalid configuration values."""
    pass
