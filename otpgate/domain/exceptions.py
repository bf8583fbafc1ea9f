"""
Domain exceptions - Error taxonomy for registration and authentication.

Each branch of the hierarchy maps to one externally visible class of
failure. The API layer translates these into status codes; nothing
below the domain is allowed to reach the boundary unclassified.
"""


class IdentityError(Exception):
    """Base class for all identity domain errors."""

    pass


# Validation


class InvalidInput(IdentityError):
    """Input has the wrong shape or violates a domain bound."""

    pass


class InputTooLarge(InvalidInput):
    """Plaintext exceeds the hasher's input bound."""

    pass


class InvalidAvatar(InvalidInput):
    """Avatar is too large or is not a recognized image."""

    pass


# Conflict


class ConflictError(IdentityError):
    """Uniqueness violation."""

    pass


class EmailAlreadyVerified(ConflictError):
    """A confirmed identity already owns this email."""

    pass


class DuplicateEmail(ConflictError):
    """Identity store rejected a write because the email is taken."""

    pass


# Authentication


class AuthenticationError(IdentityError):
    """Credentials or token rejected."""

    pass


class InvalidCredentials(AuthenticationError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    pass


class NotVerified(AuthenticationError):
    """Password matched but the identity is not verified."""

    pass


class TokenInvalid(AuthenticationError):
    """Token is malformed, tampered with, or signed with another key."""

    pass


class TokenExpired(AuthenticationError):
    """Token signature is valid but its expiry has passed."""

    pass


# Not found


class IdentityNotFound(IdentityError):
    """Referenced identity does not exist."""

    pass


# Dependency


class DependencyError(IdentityError):
    """A store or the notifier failed or timed out. Retryable."""

    pass


class StoreUnavailable(DependencyError):
    """Backing store could not complete the operation."""

    pass


class NotificationFailed(DependencyError):
    """The notifier could not deliver the verification code."""

    pass
