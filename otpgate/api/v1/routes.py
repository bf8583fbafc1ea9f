"""
API v1 routes.

Defines REST endpoints for registration, verification, login, profile
editing and administrative user management.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from otpgate.api.dependencies import (
    get_account_service,
    get_app_settings,
    get_current_claims,
    get_registration_service,
    require_admin,
)
from otpgate.api.models import (
    EditProfileRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UpdateUserRequest,
    UserSummary,
    VerifyRequest,
    VerifyResponse,
)
from otpgate.config.settings import Settings
from otpgate.domain.accounts import AccountService
from otpgate.domain.exceptions import (
    DuplicateEmail,
    EmailAlreadyVerified,
    IdentityNotFound,
    InvalidCredentials,
    InvalidInput,
    NotificationFailed,
    NotVerified,
)
from otpgate.domain.models import TokenClaims
from otpgate.domain.ports import VerifyResult
from otpgate.domain.registration import RegistrationService, normalize_email

router = APIRouter(prefix="/auth", tags=["v1"])

GENERIC_CODE_FAILURE = "Invalid or expired verification code"

_CODE_FAILURE_DETAILS = {
    VerifyResult.NOT_FOUND: "No pending registration for this email",
    VerifyResult.EXPIRED: "Verification code expired",
    VerifyResult.MISMATCH: "Verification code does not match",
}


def _bad_request(exc: InvalidInput) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


def _email_in_use() -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid input"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        502: {"model": ErrorResponse, "description": "Verification code could not be delivered"},
        422: {"description": "Validation error"},
    },
    summary="Register a new user",
    description="Submit name, email and password to begin registration. "
    "A one-time verification code will be sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> RegisterResponse:
    """
    Register a new user and send verification code.

    - **name**: Display name
    - **email**: Valid email address to register
    - **password**: Password (minimum 8 characters)

    A second registration for an unverified email replaces the first
    and invalidates its code.
    """
    try:
        registration = service.register(
            request_data.name, request_data.email, request_data.password
        )
    except EmailAlreadyVerified:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        ) from None
    except NotificationFailed:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Verification code could not be delivered",
        ) from None
    except InvalidInput as exc:
        raise _bad_request(exc) from None

    return RegisterResponse(
        message="Verification code sent",
        email=registration.email,
        expires_in_seconds=settings.otp_ttl_seconds,
    )


@router.post(
    "/verify",
    response_model=VerifyResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired code"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        422: {"description": "Validation error"},
    },
    summary="Verify email with one-time code",
    description="Submit the verification code received via email to confirm the account.",
)
def verify(
    request_data: VerifyRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> VerifyResponse:
    result = service.verify(request_data.email, request_data.code)

    if result is VerifyResult.VERIFIED:
        return VerifyResponse(message="Email verified", email=normalize_email(request_data.email))

    if result is VerifyResult.ALREADY_VERIFIED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already verified",
        )

    detail = GENERIC_CODE_FAILURE
    if settings.expose_otp_failure_reason:
        detail = _CODE_FAILURE_DETAILS[result]
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials or unverified account"},
        422: {"description": "Validation error"},
    },
    summary="Login a user",
    description="Exchange email and password for a bearer token valid for one hour.",
)
def login(
    request_data: LoginRequest,
    service: RegistrationService = Depends(get_registration_service),
    settings: Settings = Depends(get_app_settings),
) -> LoginResponse:
    try:
        result = service.login(request_data.email, request_data.password)
    except InvalidCredentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        ) from None
    except NotVerified:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not verified",
        ) from None

    return LoginResponse(
        message="Login successful",
        token=result.token,
        expires_in_seconds=settings.token_ttl_seconds,
        user=UserSummary.from_domain(result.identity),
    )


@router.get(
    "/profile",
    response_model=UserSummary,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get own profile",
)
def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    accounts: AccountService = Depends(get_account_service),
) -> UserSummary:
    try:
        return UserSummary.from_domain(accounts.get(claims.subject))
    except IdentityNotFound:
        raise _not_found() from None


@router.patch(
    "/profile",
    response_model=UserSummary,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update user profile",
    description="Change any of name, email, password and avatar of the authenticated user.",
)
def edit_profile(
    request_data: EditProfileRequest,
    claims: TokenClaims = Depends(get_current_claims),
    accounts: AccountService = Depends(get_account_service),
) -> UserSummary:
    try:
        summary = accounts.edit_profile(
            claims.subject,
            display_name=request_data.name,
            email=request_data.email,
            password=request_data.password,
            avatar=request_data.avatar,
        )
    except IdentityNotFound:
        raise _not_found() from None
    except DuplicateEmail:
        raise _email_in_use() from None
    except InvalidInput as exc:
        raise _bad_request(exc) from None
    return UserSummary.from_domain(summary)


@router.get(
    "/users",
    response_model=list[UserSummary],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List users (admin)",
)
def list_users(
    _: TokenClaims = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> list[UserSummary]:
    return [UserSummary.from_domain(summary) for summary in accounts.list_users()]


@router.get(
    "/users/{user_id}",
    response_model=UserSummary,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Get a user (admin)",
)
def get_user(
    user_id: str,
    _: TokenClaims = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> UserSummary:
    try:
        return UserSummary.from_domain(accounts.get(user_id))
    except IdentityNotFound:
        raise _not_found() from None


@router.put(
    "/users/{user_id}",
    response_model=UserSummary,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update a user (admin)",
)
def update_user(
    user_id: str,
    request_data: UpdateUserRequest,
    _: TokenClaims = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> UserSummary:
    try:
        summary = accounts.update_user(
            user_id,
            display_name=request_data.name,
            email=request_data.email,
            is_verified=request_data.is_verified,
            role=request_data.role,
        )
    except IdentityNotFound:
        raise _not_found() from None
    except DuplicateEmail:
        raise _email_in_use() from None
    except InvalidInput as exc:
        raise _bad_request(exc) from None
    return UserSummary.from_domain(summary)


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete a user (admin)",
)
def delete_user(
    user_id: str,
    _: TokenClaims = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> MessageResponse:
    try:
        accounts.delete_user(user_id)
    except IdentityNotFound:
        raise _not_found() from None
    return MessageResponse(message="User deleted")
