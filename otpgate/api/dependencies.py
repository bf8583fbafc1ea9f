"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories that assemble domain services
from the adapters stored on app.state during lifespan startup, and the
bearer-token guards for authenticated routes.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from otpgate.config.settings import Settings
from otpgate.domain.accounts import AccountService
from otpgate.domain.exceptions import TokenExpired, TokenInvalid
from otpgate.domain.models import Role, TokenClaims
from otpgate.domain.registration import RegistrationService
from otpgate.domain.tokens import TokenIssuer

# Bearer scheme for OpenAPI documentation; missing header handled below
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_token_issuer(request: Request) -> TokenIssuer:
    return request.app.state.tokens


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the stores, notifier, hasher, OTP generator and
    token issuer created at startup.
    """
    state = request.app.state
    return RegistrationService(
        pending=state.pending_store,
        identities=state.identities,
        notifier=state.notifier,
        hasher=state.hasher,
        otp=state.otp,
        tokens=state.tokens,
        admin=state.admin,
    )


def get_account_service(request: Request) -> AccountService:
    state = request.app.state
    return AccountService(identities=state.identities, hasher=state.hasher)


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> TokenClaims:
    """
    Verify the bearer token and return its claims.

    - Missing or non-bearer Authorization header: 401
    - Invalid, tampered or expired token: 403
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return tokens.verify(credentials.credentials)
    except (TokenInvalid, TokenExpired):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid token",
        ) from None


def require_admin(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
    """Allow only tokens carrying the admin role."""
    if claims.role is not Role.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Admins only.",
        )
    return claims
