"""
SMS OTP Authorization
=====================
Operation-bound code generation, challenge lifecycle, account masking and
combined SMS and password verification.
"""

from ..models import (
    AccountStatus,
    Amount,
    AuthenticationContext,
    AuthorizationCode,
    AuthorizationError,
    AuthorizationResult,
    AuthorizationStatus,
    Challenge,
    ChallengeState,
    CombinedResult,
    DeliveryResult,
    FormData,
    IssuedChallenge,
    OperationContext,
    PasswordProtection,
    UserDetail,
)
from .digest import compute_digest, generate_salt, codes_match
from .extractors import (
    ACCOUNT_ATTRIBUTE_ID,
    OperationFields,
    OperationRegistry,
    create_default_registry,
)
from .generator import CodeGenerator
from .messages import MessageRenderer
from .engine import OtpLifecycleEngine, utc_now
from .gate import AccountStatusGate
from .aggregator import MultiFactorAggregator

__all__ = [
    # Models
    "AccountStatus",
    "Amount",
    "AuthenticationContext",
    "AuthorizationCode",
    "AuthorizationError",
    "AuthorizationResult",
    "AuthorizationStatus",
    "Challenge",
    "ChallengeState",
    "CombinedResult",
    "DeliveryResult",
    "FormData",
    "IssuedChallenge",
    "OperationContext",
    "PasswordProtection",
    "UserDetail",
    # Digest
    "compute_digest",
    "generate_salt",
    "codes_match",
    # Extractors
    "ACCOUNT_ATTRIBUTE_ID",
    "OperationFields",
    "OperationRegistry",
    "create_default_registry",
    # Components
    "CodeGenerator",
    "MessageRenderer",
    "OtpLifecycleEngine",
    "utc_now",
    "AccountStatusGate",
    "MultiFactorAggregator",
]
