"""
Registration domain service - Identity verification state machine.

This module contains the core business logic for admitting a new
identity, implemented as a forward-only state machine per email.

State Machine
=============

States:
- UNREGISTERED: No pending entry and no identity for the email
- PENDING: A pending registration holds a password hash and an OTP
- VERIFIED: A confirmed identity exists in the identity store

Valid Transitions:
    UNREGISTERED -> PENDING   (register)
    PENDING -> PENDING        (register again; latest attempt wins, earlier OTP is dead)
    PENDING -> VERIFIED       (verify with matching, unexpired code)

An identity whose verified flag an administrator has cleared counts as
not verified: register is allowed again, and a matching code marks the
existing identity verified with the new password and display name.

Invalid Transitions (rejected):
    VERIFIED -> PENDING       (register on a verified email raises EmailAlreadyVerified)

Pending entries are never mutated: a failed verification leaves the
entry as it was, and a successful one deletes it after the identity has
been created. Two concurrent verifications for the same email resolve
through the identity store's unique-email constraint: exactly one
create() succeeds, the other observes ALREADY_VERIFIED.
"""

import hmac
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime

from .exceptions import (
    DuplicateEmail,
    EmailAlreadyVerified,
    InvalidCredentials,
    NotificationFailed,
    NotVerified,
)
from .hashing import CredentialHasher
from .models import (
    AdminCredentials,
    Identity,
    IdentitySummary,
    LoginResult,
    PendingRegistration,
    Role,
)
from .otp import OtpGenerator
from .ports import (
    Clock,
    IdentityRepository,
    Notifier,
    OtpCheck,
    PendingRegistrationStore,
    RegistrationState,
    VerifyResult,
    utc_now,
)
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class RegistrationService:
    """
    Domain service for register, verify and login.

    Orchestrates email normalization, password hashing, OTP generation,
    pending-entry persistence, identity creation and token issuance.
    """

    pending: PendingRegistrationStore
    identities: IdentityRepository
    notifier: Notifier
    hasher: CredentialHasher
    otp: OtpGenerator
    tokens: TokenIssuer
    admin: AdminCredentials | None = None
    clock: Clock = field(default=utc_now)

    def register(self, display_name: str, email: str, password: str) -> PendingRegistration:
        """
        Start a registration by storing a pending entry and sending its code.

        Args:
            display_name: Name to give the identity once verified
            email: User's email address (will be normalized)
            password: User's password (will be hashed)

        Returns:
            The stored pending registration

        Raises:
            EmailAlreadyVerified: If a verified identity owns the email
            InputTooLarge: If the password exceeds the hasher's bound
            NotificationFailed: If the code could not be delivered. The
                pending entry is kept; it is not rolled back.
        """
        normalized_email = normalize_email(email)

        existing = self.identities.find_by_email(normalized_email)
        if existing is not None and existing.is_verified:
            raise EmailAlreadyVerified(normalized_email)

        password_hash = self.hasher.hash(password)
        code, expires_at = self.otp.generate(self.clock())
        registration = PendingRegistration(
            email=normalized_email,
            display_name=display_name.strip(),
            password_hash=password_hash,
            otp_code=code,
            otp_expires_at=expires_at,
        )
        self.pending.put(registration)
        logger.info("Registration pending for %s", normalized_email)

        try:
            self.notifier.send_verification_code(normalized_email, code, expires_at)
        except Exception as exc:
            logger.warning("Verification code delivery failed for %s", normalized_email, exc_info=True)
            raise NotificationFailed(normalized_email) from exc

        return registration

    def verify(self, email: str, code: str | int) -> VerifyResult:
        """
        Confirm a pending registration with its one-time code.

        Return values by scenario:
        - VERIFIED: Code matched before expiry; identity created (or an
          unverified one re-confirmed), pending entry removed
        - NOT_FOUND: No pending entry and no verified identity for the email
        - EXPIRED: now >= otp_expires_at (even if the code matches)
        - MISMATCH: Code differs; pending entry left untouched
        - ALREADY_VERIFIED: Another verification created the identity first

        Args:
            email: User's email (will be normalized)
            code: Submitted code, as string or integer

        Returns:
            VerifyResult indicating success or specific failure reason
        """
        normalized_email = normalize_email(email)

        registration = self.pending.get(normalized_email)
        if registration is None:
            if self._verified_identity_exists(normalized_email):
                return VerifyResult.ALREADY_VERIFIED
            return VerifyResult.NOT_FOUND

        check = self.otp.validate(
            code, registration.otp_code, registration.otp_expires_at, self.clock()
        )
        if check is OtpCheck.EXPIRED:
            logger.info("Verification code expired for %s", normalized_email)
            return VerifyResult.EXPIRED
        if check is OtpCheck.MISMATCH:
            logger.info("Verification code mismatch for %s", normalized_email)
            return VerifyResult.MISMATCH

        now = self.clock()
        existing = self.identities.find_by_email(normalized_email)
        if existing is not None:
            if existing.is_verified:
                self.pending.delete(normalized_email)
                return VerifyResult.ALREADY_VERIFIED
            return self._reconfirm(existing, registration, now)

        identity = Identity(
            display_name=registration.display_name,
            email=normalized_email,
            password_hash=registration.password_hash,
            created_at=now,
            updated_at=now,
            is_verified=True,
            role=Role.USER,
        )
        try:
            self.identities.create(identity)
        except DuplicateEmail:
            # Lost the race; still clean up the pending entry
            self.pending.delete(normalized_email)
            return VerifyResult.ALREADY_VERIFIED

        self.pending.delete(normalized_email)
        logger.info("Identity %s verified for %s", identity.id, normalized_email)
        return VerifyResult.VERIFIED

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate with email and password and issue a bearer token.

        The configured admin pair is checked first, in constant time.
        Unknown email and wrong password raise the same error, and
        bcrypt runs in both cases.

        Raises:
            InvalidCredentials: Unknown email or wrong password
            NotVerified: Password matched but identity is not verified
        """
        normalized_email = normalize_email(email)

        admin_result = self._admin_login(normalized_email, password)
        if admin_result is not None:
            return admin_result

        identity = self.identities.find_by_email(normalized_email)
        if identity is None:
            self.hasher.burn(password)
            logger.info("Login rejected")
            raise InvalidCredentials()

        if not self.hasher.verify(password, identity.password_hash):
            logger.info("Login rejected")
            raise InvalidCredentials()

        if not identity.is_verified:
            raise NotVerified()

        token = self.tokens.issue(identity.id, identity.role)
        return LoginResult(token=token, identity=IdentitySummary.from_identity(identity))

    def state_of(self, email: str) -> RegistrationState:
        """Current lifecycle state for an email."""
        normalized_email = normalize_email(email)
        if self._verified_identity_exists(normalized_email):
            return RegistrationState.VERIFIED
        if self.pending.get(normalized_email) is not None:
            return RegistrationState.PENDING
        return RegistrationState.UNREGISTERED

    def _reconfirm(
        self, identity: Identity, registration: PendingRegistration, now: datetime
    ) -> VerifyResult:
        """Mark an identity whose verification was revoked as verified again."""
        self.identities.save(
            replace(
                identity,
                display_name=registration.display_name,
                password_hash=registration.password_hash,
                is_verified=True,
                updated_at=now,
            )
        )
        self.pending.delete(registration.email)
        logger.info("Identity %s re-verified for %s", identity.id, registration.email)
        return VerifyResult.VERIFIED

    def _verified_identity_exists(self, email: str) -> bool:
        identity = self.identities.find_by_email(email)
        return identity is not None and identity.is_verified

    def _admin_login(self, email: str, password: str) -> LoginResult | None:
        if self.admin is None or not self.admin.email or not self.admin.password:
            return None

        # Compare both fields unconditionally
        email_ok = hmac.compare_digest(email.encode(), normalize_email(self.admin.email).encode())
        password_ok = hmac.compare_digest(password.encode(), self.admin.password.encode())
        if not (email_ok and password_ok):
            return None

        logger.info("Administrative login")
        token = self.tokens.issue(self.admin.subject, Role.ADMIN)
        summary = IdentitySummary(
            id=self.admin.subject,
            display_name=self.admin.display_name,
            email=normalize_email(self.admin.email),
            role=Role.ADMIN,
            is_verified=True,
            has_avatar=False,
            created_at=None,
            updated_at=None,
        )
        return LoginResult(token=token, identity=summary)
