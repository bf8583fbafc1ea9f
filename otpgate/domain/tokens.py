"""
Token issuer - Signed bearer tokens (JWT, HMAC) with a fixed lifetime.

Signature and shape are checked by PyJWT; expiry is checked here against
the injected clock so that tests can move time without sleeping. A
tampered token and a syntactically malformed one both surface as
TokenInvalid.
"""

from datetime import datetime, timedelta, timezone

import jwt

from .exceptions import TokenExpired, TokenInvalid
from .models import Role, TokenClaims
from .ports import Clock, utc_now

_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


class TokenIssuer:
    """Issues and verifies bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=1),
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, subject: str, role: Role | None = None, ttl: timedelta | None = None) -> str:
        """Sign a claim set for subject, valid for ttl (default: one hour)."""
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + (ttl if ttl is not None else self.ttl)
        payload = {
            "sub": subject,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        if role is not None:
            payload["role"] = role.value
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, then expiry.

        Raises:
            TokenInvalid: Malformed token, bad signature, missing claims
            TokenExpired: Valid signature but now >= exp
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "require": _REQUIRED_CLAIMS,
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
            subject = payload["sub"]
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
            role = Role(payload["role"]) if "role" in payload else None
        except (jwt.InvalidTokenError, KeyError, TypeError, ValueError, OverflowError):
            raise TokenInvalid("Invalid token") from None

        if not isinstance(subject, str) or not subject:
            raise TokenInvalid("Invalid token")
        if self._clock() >= expires_at:
            raise TokenExpired("Token expired")

        return TokenClaims(
            subject=subject,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
