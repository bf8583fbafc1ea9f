"""
Domain layer - Pure business logic with zero web framework imports.

This package contains the identity verification state machine and the
credential lifecycle. It defines its own port interfaces for storage and
notification, so adapters can be swapped without touching the rules.
"""

from .accounts import AccountService
from .exceptions import (
    AuthenticationError,
    ConflictError,
    DependencyError,
    DuplicateEmail,
    EmailAlreadyVerified,
    IdentityError,
    IdentityNotFound,
    InputTooLarge,
    InvalidAvatar,
    InvalidCredentials,
    InvalidInput,
    NotificationFailed,
    NotVerified,
    StoreUnavailable,
    TokenExpired,
    TokenInvalid,
)
from .hashing import CredentialHasher
from .models import (
    AdminCredentials,
    Identity,
    IdentitySummary,
    LoginResult,
    PendingRegistration,
    Role,
    TokenClaims,
)
from .otp import OtpGenerator
from .ports import (
    IdentityRepository,
    Notifier,
    OtpCheck,
    PendingRegistrationStore,
    RegistrationState,
    VerifyResult,
)
from .registration import RegistrationService, normalize_email
from .tokens import TokenIssuer

__all__ = [
    "AccountService",
    "AdminCredentials",
    "AuthenticationError",
    "ConflictError",
    "CredentialHasher",
    "DependencyError",
    "DuplicateEmail",
    "EmailAlreadyVerified",
    "Identity",
    "IdentityError",
    "IdentityNotFound",
    "IdentityRepository",
    "IdentitySummary",
    "InputTooLarge",
    "InvalidAvatar",
    "InvalidCredentials",
    "InvalidInput",
    "LoginResult",
    "NotVerified",
    "NotificationFailed",
    "Notifier",
    "OtpCheck",
    "OtpGenerator",
    "PendingRegistration",
    "PendingRegistrationStore",
    "RegistrationService",
    "RegistrationState",
    "Role",
    "StoreUnavailable",
    "TokenClaims",
    "TokenExpired",
    "TokenInvalid",
    "TokenIssuer",
    "VerifyResult",
    "normalize_email",
]
