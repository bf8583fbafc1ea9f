"""
Account service - Profile edits and administrative user management.

Every mutation follows the same pattern: load the identity by id, build
an updated copy, save it back. The repository enforces email uniqueness
on save.
"""

import logging
from dataclasses import dataclass, field, replace

from .exceptions import IdentityNotFound, InvalidAvatar, InvalidInput
from .hashing import CredentialHasher
from .models import Identity, IdentitySummary, Role
from .ports import Clock, IdentityRepository, utc_now
from .registration import normalize_email

logger = logging.getLogger(__name__)

MAX_AVATAR_BYTES = 5 * 1024 * 1024

_IMAGE_SIGNATURES = (
    b"\x89PNG\r\n\x1a\n",
    b"\xff\xd8\xff",
    b"GIF87a",
    b"GIF89a",
)


def is_image(data: bytes) -> bool:
    """True if data starts with a PNG, JPEG, GIF or WebP signature."""
    if data.startswith(_IMAGE_SIGNATURES):
        return True
    return len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP"


@dataclass
class AccountService:
    """Profile and user-management operations on confirmed identities."""

    identities: IdentityRepository
    hasher: CredentialHasher
    clock: Clock = field(default=utc_now)

    def get(self, identity_id: str) -> IdentitySummary:
        return IdentitySummary.from_identity(self._load(identity_id))

    def list_users(self) -> list[IdentitySummary]:
        identities = sorted(self.identities.list_all(), key=lambda i: i.created_at)
        return [IdentitySummary.from_identity(i) for i in identities]

    def edit_profile(
        self,
        identity_id: str,
        display_name: str | None = None,
        email: str | None = None,
        password: str | None = None,
        avatar: bytes | None = None,
    ) -> IdentitySummary:
        """
        Apply a self-service profile edit. Omitted fields are left as is.

        A new email takes effect immediately and keeps the identity's
        verified flag. No code is sent to the new address, so control of
        it is never proven the way registration proves it.

        Raises:
            IdentityNotFound: No identity with this id
            DuplicateEmail: New email belongs to another identity
            InvalidAvatar: Avatar too large or not an image
            InputTooLarge: Password exceeds the hasher's bound
        """
        identity = self._load(identity_id)
        changes: dict = {}

        if display_name is not None:
            changes["display_name"] = self._clean_name(display_name)
        if email is not None:
            changes["email"] = normalize_email(email)
        if password is not None:
            changes["password_hash"] = self.hasher.hash(password)
        if avatar is not None:
            self._check_avatar(avatar)
            changes["avatar"] = avatar

        saved = self._save(identity, changes)
        logger.info("Profile updated for identity %s", identity_id)
        return IdentitySummary.from_identity(saved)

    def update_user(
        self,
        identity_id: str,
        display_name: str | None = None,
        email: str | None = None,
        is_verified: bool | None = None,
        role: Role | None = None,
    ) -> IdentitySummary:
        """Administrative edit of name, email, verification flag and role."""
        identity = self._load(identity_id)
        changes: dict = {}

        if display_name is not None:
            changes["display_name"] = self._clean_name(display_name)
        if email is not None:
            changes["email"] = normalize_email(email)
        if is_verified is not None:
            changes["is_verified"] = is_verified
        if role is not None:
            changes["role"] = role

        saved = self._save(identity, changes)
        logger.info("Identity %s updated by administrator", identity_id)
        return IdentitySummary.from_identity(saved)

    def delete_user(self, identity_id: str) -> None:
        """
        Raises:
            IdentityNotFound: No identity with this id
        """
        if not self.identities.delete(identity_id):
            raise IdentityNotFound(identity_id)
        logger.info("Identity %s deleted by administrator", identity_id)

    def _load(self, identity_id: str) -> Identity:
        identity = self.identities.find_by_id(identity_id)
        if identity is None:
            raise IdentityNotFound(identity_id)
        return identity

    def _save(self, identity: Identity, changes: dict) -> Identity:
        if not changes:
            return identity
        updated = replace(identity, updated_at=self.clock(), **changes)
        return self.identities.save(updated)

    def _clean_name(self, display_name: str) -> str:
        name = display_name.strip()
        if not name:
            raise InvalidInput("Display name must not be empty")
        return name

    def _check_avatar(self, avatar: bytes) -> None:
        if len(avatar) > MAX_AVATAR_BYTES:
            raise InvalidAvatar("Avatar must be at most 5 MiB")
        if not is_image(avatar):
            raise InvalidAvatar("Avatar must be a PNG, JPEG, GIF or WebP image")
