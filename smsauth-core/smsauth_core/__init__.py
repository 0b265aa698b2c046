"""
SMS Authorization Core
======================
SMS one-time-password authorization for login and payment operations.
"""

__version__ = "0.1.0"

# Configuration
from smsauth_core.config import SmsAuthorizationConfig

# Exceptions
from smsauth_core.exceptions import (
    SmsAuthorizationError,
    UnsupportedOperation,
    InvalidContext,
    ChallengeNotFound,
    StorageFailure,
    RemoteDeliveryFailure,
    ConfigurationError,
)

# Models
from smsauth_core.models import (
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

# Authorization
from smsauth_core.authorization import (
    AccountStatusGate,
    CodeGenerator,
    MessageRenderer,
    MultiFactorAggregator,
    OperationRegistry,
    OtpLifecycleEngine,
    create_default_registry,
)

# Persistence
from smsauth_core.persistence import (
    ChallengeStore,
    InMemoryChallengeStore,
    SqlAlchemyChallengeStore,
    RedisChallengeStore,
)

# Delivery
from smsauth_core.delivery import SmsGateway, LoggingSmsGateway, TwilioSmsGateway

# Credentials
from smsauth_core.credentials import (
    PasswordAuthenticator,
    HashedPasswordAuthenticator,
    PasswordAuthentication,
    PasswordAuthenticationResult,
)

# Accounts
from smsauth_core.accounts import AccountDirectory, AccountRecord, InMemoryAccountDirectory

# Audit
from smsauth_core.audit import AuditEventType, AuditEvent, AuditTrail, verify_chain

# Logging
from smsauth_core.logging_config import setup_logging, bind_operation

# Service
from smsauth_core.service import SmsAuthorizationService, create_service

__all__ = [
    "__version__",
    # Configuration
    "SmsAuthorizationConfig",
    # Exceptions
    "SmsAuthorizationError",
    "UnsupportedOperation",
    "InvalidContext",
    "ChallengeNotFound",
    "StorageFailure",
    "RemoteDeliveryFailure",
    "ConfigurationError",
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
    # Authorization
    "AccountStatusGate",
    "CodeGenerator",
    "MessageRenderer",
    "MultiFactorAggregator",
    "OperationRegistry",
    "OtpLifecycleEngine",
    "create_default_registry",
    # Persistence
    "ChallengeStore",
    "InMemoryChallengeStore",
    "SqlAlchemyChallengeStore",
    "RedisChallengeStore",
    # Delivery
    "SmsGateway",
    "LoggingSmsGateway",
    "TwilioSmsGateway",
    # Credentials
    "PasswordAuthenticator",
    "HashedPasswordAuthenticator",
    "PasswordAuthentication",
    "PasswordAuthenticationResult",
    # Accounts
    "AccountDirectory",
    "AccountRecord",
    "InMemoryAccountDirectory",
    # Audit
    "AuditEventType",
    "AuditEvent",
    "AuditTrail",
    "verify_chain",
    # Logging
    "setup_logging",
    "bind_operation",
    # Service
    "SmsAuthorizationService",
    "create_service",
]
