"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols structurally.
"""

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from typing import Protocol

from .models import Identity, PendingRegistration

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class RegistrationState(str, Enum):
    """
    Per-email lifecycle.

    Transitions (forward-only):
    - UNREGISTERED -> PENDING  (register)
    - PENDING -> PENDING       (register again; newest code wins)
    - PENDING -> VERIFIED      (verify with correct, unexpired code)

    VERIFIED never moves back to PENDING: registering a verified email
    is rejected.
    """

    UNREGISTERED = "UNREGISTERED"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"


class OtpCheck(Enum):
    """Outcome of comparing a submitted code against the stored one."""

    OK = "ok"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


class VerifyResult(Enum):
    """
    Result of a verification attempt.

    Used by RegistrationService.verify() to indicate success or the
    specific failure reason.
    """

    VERIFIED = "verified"
    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    MISMATCH = "mismatch"
    ALREADY_VERIFIED = "already_verified"


class PendingRegistrationStore(Protocol):
    """Port interface for not-yet-confirmed registrations, keyed by email."""

    def put(self, registration: PendingRegistration) -> None:
        """Upsert, replacing any earlier pending entry for the same email."""
        ...

    def get(self, email: str) -> PendingRegistration | None:
        """Return the pending entry for email, or None."""
        ...

    def delete(self, email: str) -> None:
        """Remove the pending entry. Idempotent."""
        ...

    def purge_expired(self, now: datetime) -> int:
        """
        Delete every entry whose OTP expired at or before now.

        Returns:
            Number of entries removed
        """
        ...


class IdentityRepository(Protocol):
    """
    Port interface for confirmed identities.

    Email is unique across all identities. Implementations must make
    create() atomic with respect to that constraint: of two concurrent
    creates for the same email exactly one succeeds and the other
    raises DuplicateEmail.
    """

    def find_by_email(self, email: str) -> Identity | None: ...

    def find_by_id(self, identity_id: str) -> Identity | None: ...

    def create(self, identity: Identity) -> Identity:
        """
        Insert a new identity.

        Raises:
            DuplicateEmail: If the email is already present
        """
        ...

    def save(self, identity: Identity) -> Identity:
        """
        Replace the full record with the same id.

        Raises:
            IdentityNotFound: If no identity has this id
            DuplicateEmail: If the new email belongs to another identity
        """
        ...

    def delete(self, identity_id: str) -> bool:
        """Delete by id. Returns False if nothing was deleted."""
        ...

    def list_all(self) -> list[Identity]: ...


class Notifier(Protocol):
    """Port interface for delivering verification codes."""

    def send_verification_code(self, email: str, code: str, expires_at: datetime) -> None:
        """
        Deliver the code to the email address.

        Args:
            email: Recipient email address
            code: Fixed-width numeric verification code
            expires_at: Moment the code stops being accepted
        """
        ...
