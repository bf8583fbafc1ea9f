"""
One-time password generation and validation.

Codes are fixed-width numeric strings drawn from the secrets module, so
they cannot be predicted from time or a counter. Stored and submitted
codes are normalized to the same canonical string before comparison;
a submitted integer 42 and the string "000042" are the same code.
"""

import secrets
from datetime import datetime, timedelta

from .ports import OtpCheck


class OtpGenerator:
    """Generates time-bounded codes and validates submissions."""

    def __init__(self, digits: int = 6, ttl: timedelta = timedelta(minutes=10)) -> None:
        if digits < 1:
            raise ValueError("digits must be positive")
        self.digits = digits
        self.ttl = ttl

    def generate(self, now: datetime) -> tuple[str, datetime]:
        """
        Generate a fresh code.

        Returns:
            (code, expires_at) where expires_at = now + ttl
        """
        code = "".join(secrets.choice("0123456789") for _ in range(self.digits))
        return code, now + self.ttl

    def normalize(self, code: str | int) -> str | None:
        """
        Canonical form of a code, or None if it cannot be one.

        Integers and digit strings are left-padded with zeros to the
        configured width. Booleans, negatives and non-digit strings are
        rejected.
        """
        if isinstance(code, bool):
            return None
        if isinstance(code, int):
            if code < 0:
                return None
            text = str(code)
        elif isinstance(code, str):
            text = code.strip()
        else:
            return None
        if not text or not text.isascii() or not text.isdigit():
            return None
        return text.zfill(self.digits)

    def validate(
        self,
        submitted: str | int,
        stored: str | int,
        expires_at: datetime,
        now: datetime,
    ) -> OtpCheck:
        """
        Check a submitted code.

        Expiry is checked first: a correct code submitted at or after
        expires_at is EXPIRED, not OK.
        """
        if now >= expires_at:
            return OtpCheck.EXPIRED

        canonical_submitted = self.normalize(submitted)
        canonical_stored = self.normalize(stored)
        if canonical_submitted is None or canonical_stored is None:
            return OtpCheck.MISMATCH
        if not secrets.compare_digest(canonical_submitted.encode(), canonical_stored.encode()):
            return OtpCheck.MISMATCH
        return OtpCheck.OK
