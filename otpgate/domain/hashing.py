"""
Credential hasher - One-way password hashing with bcrypt.

bcrypt salts every call and its checkpw() comparison is constant-time.
Its input is limited to 72 bytes; longer passwords are rejected rather
than silently truncated.
"""

import bcrypt

from .exceptions import InputTooLarge, InvalidInput

MAX_PASSWORD_BYTES = 72


class CredentialHasher:
    """Hashes and verifies passwords with a configurable bcrypt cost."""

    def __init__(self, cost: int = 10) -> None:
        self._cost = cost
        self._dummy_hash = self.hash("dummy_password_for_timing_safety")

    def hash(self, plaintext: str) -> str:
        """
        Hash a password with a fresh random salt.

        Raises:
            InvalidInput: If the password is not encodable as UTF-8
            InputTooLarge: If the UTF-8 encoding exceeds 72 bytes
        """
        try:
            encoded = plaintext.encode("utf-8")
        except UnicodeEncodeError:
            raise InvalidInput("Password must be valid UTF-8") from None
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise InputTooLarge(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._cost)).decode()

    def verify(self, plaintext: str, password_hash: str | None) -> bool:
        """
        Check a password against a stored hash.

        Never raises: malformed or missing hashes simply fail. A missing
        hash is still compared against a dummy so that the call costs
        the same as a real check.
        """
        encoded = plaintext.encode("utf-8", errors="replace")
        if len(encoded) > MAX_PASSWORD_BYTES:
            encoded = encoded[:MAX_PASSWORD_BYTES]
            password_hash = None
        try:
            if password_hash is None:
                bcrypt.checkpw(encoded, self._dummy_hash.encode())
                return False
            return bcrypt.checkpw(encoded, password_hash.encode())
        except (ValueError, TypeError):
            return False

    def burn(self, plaintext: str) -> None:
        """Run a comparison against the dummy hash and discard the result."""
        self.verify(plaintext, None)
