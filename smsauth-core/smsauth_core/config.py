"""
SMS Authorization Configuration
===============================
Configuration for OTP lifetime, attempt limits and service wiring.

Values are read from the environment once, when the config is created.
"""

import os
from dataclasses import dataclass, field

from .exceptions import ConfigurationError


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class SmsAuthorizationConfig:
    """Configuration for SMS OTP authorization."""
    otp_expiration_seconds: int = field(
        default_factory=lambda: _env_int("SMS_OTP_EXPIRATION_TIME", 300)
    )
    max_verify_attempts: int = field(
        default_factory=lambda: _env_int("SMS_OTP_MAX_VERIFY_TRIES_PER_MESSAGE", 5)
    )
    code_length: int = field(
        default_factory=lambda: _env_int("SMS_OTP_CODE_LENGTH", 8)
    )
    default_language: str = field(
        default_factory=lambda: os.environ.get("SMS_DEFAULT_LANGUAGE", "en")
    )
    database_url: str = field(
        default_factory=lambda: os.environ.get(
            "DATABASE_URL", "sqlite+aiosqlite:///./smsauth.db"
        )
    )
    service_name: str = field(
        default_factory=lambda: os.environ.get("SERVICE_NAME", "smsauth-core")
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )
    log_json: bool = field(
        default_factory=lambda: _env_bool("LOG_JSON", True)
    )
    masked_delay_ms: int = field(
        default_factory=lambda: _env_int("SMS_MASKED_DELAY_MS", 0)
    )

    def __post_init__(self):
        if self.otp_expiration_seconds <= 0:
            raise ConfigurationError("OTP expiration time must be positive")
        if self.max_verify_attempts <= 0:
            raise ConfigurationError("Max verify attempts must be positive")
        if self.masked_delay_ms < 0:
            raise ConfigurationError("Masked delay must not be negative")
        # 10 digits is the most a 31-bit truncated digest can fill
        if not 4 <= self.code_length <= 10:
            raise ConfigurationError("Code length must be between 4 and 10")
