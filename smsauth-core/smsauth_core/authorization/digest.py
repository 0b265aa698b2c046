"""
Authorization Digest
====================
Salted HMAC digest over ordered operation fields, truncated to a decimal code.
"""

import hashlib
import hmac
import secrets
from typing import Sequence

SALT_BYTES = 16
ITEM_SEPARATOR = "&"


def generate_salt() -> bytes:
    """Generate a random salt for digest computation."""
    return secrets.token_bytes(SALT_BYTES)


def compute_digest(items: Sequence[str], salt: bytes, length: int = 8) -> str:
    """
    Compute a decimal authorization code over ordered digest items.

    HMAC-SHA256 keyed by the salt is computed over the items joined with
    ``&``, then dynamically truncated (RFC 4226 style) to ``length`` digits.

    Args:
        items: Ordered canonical field values
        salt: Random salt used as the HMAC key
        length: Number of decimal digits

    Returns:
        Zero-padded decimal code
    """
    data = ITEM_SEPARATOR.join(items).encode("utf-8")
    mac = hmac.new(salt, data, hashlib.sha256).digest()

    offset = mac[-1] & 0x0F
    number = (
        (mac[offset] & 0x7F) << 24
        | mac[offset + 1] << 16
        | mac[offset + 2] << 8
        | mac[offset + 3]
    )
    return str(number % (10 ** length)).zfill(length)


def codes_match(supplied: str, expected: str) -> bool:
    """Constant-time comparison of authorization codes."""
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))
