"""
Domain models - Records held by the stores and values passed between layers.

All records are frozen dataclasses; mutation goes through
``dataclasses.replace`` followed by an explicit save.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Binary permission flag carried by identities and tokens."""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class PendingRegistration:
    """
    Unconfirmed registration awaiting OTP verification.

    Keyed by email. One entry per email; a newer registration for the
    same email replaces the older one, superseding its code.
    """

    email: str
    display_name: str
    password_hash: str
    otp_code: str
    otp_expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.otp_expires_at


@dataclass(frozen=True)
class Identity:
    """Confirmed, durably stored account."""

    display_name: str
    email: str
    password_hash: str
    created_at: datetime
    updated_at: datetime
    is_verified: bool = True
    role: Role = Role.USER
    avatar: bytes | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class IdentitySummary:
    """Redacted view of an identity. Never carries the password hash."""

    id: str
    display_name: str
    email: str
    role: Role
    is_verified: bool
    has_avatar: bool
    created_at: datetime | None
    updated_at: datetime | None

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentitySummary":
        return cls(
            id=identity.id,
            display_name=identity.display_name,
            email=identity.email,
            role=identity.role,
            is_verified=identity.is_verified,
            has_avatar=identity.avatar is not None,
            created_at=identity.created_at,
            updated_at=identity.updated_at,
        )


@dataclass(frozen=True)
class TokenClaims:
    """Claim set carried inside a bearer token."""

    subject: str
    role: Role | None
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class LoginResult:
    """Successful login: bearer token plus redacted identity summary."""

    token: str
    identity: IdentitySummary


@dataclass(frozen=True)
class AdminCredentials:
    """Fixed administrative credential pair configured outside the identity store."""

    email: str
    password: str
    subject: str = "admin"
    display_name: str = "Administrator"
