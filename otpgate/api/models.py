"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from datetime import datetime

from pydantic import Base64Bytes, BaseModel, EmailStr, Field

from otpgate.domain.models import IdentitySummary, Role


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    password: str = Field(
        ..., min_length=8, max_length=128, description="User password (min 8 characters)"
    )


class RegisterResponse(BaseModel):
    """Response model for an accepted registration."""

    message: str
    email: str
    expires_in_seconds: int


class VerifyRequest(BaseModel):
    """Request model for OTP verification."""

    email: EmailStr
    code: str | int = Field(..., description="Verification code received by email")


class VerifyResponse(BaseModel):
    """Response model for successful verification."""

    message: str
    email: str


class LoginRequest(BaseModel):
    """Request model for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class UserSummary(BaseModel):
    """Public view of an identity. Never includes the password hash."""

    id: str
    name: str
    email: str
    role: Role
    is_verified: bool
    has_avatar: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, summary: IdentitySummary) -> "UserSummary":
        return cls(
            id=summary.id,
            name=summary.display_name,
            email=summary.email,
            role=summary.role,
            is_verified=summary.is_verified,
            has_avatar=summary.has_avatar,
            created_at=summary.created_at,
            updated_at=summary.updated_at,
        )


class LoginResponse(BaseModel):
    """Response model for successful login."""

    message: str
    token: str
    token_type: str = "bearer"
    expires_in_seconds: int
    user: UserSummary


class EditProfileRequest(BaseModel):
    """Self-service profile edit. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8, max_length=128)
    avatar: Base64Bytes | None = Field(
        None, description="Base64-encoded PNG, JPEG, GIF or WebP image (max 5 MiB)"
    )


class UpdateUserRequest(BaseModel):
    """Administrative edit. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    email: EmailStr | None = None
    is_verified: bool | None = None
    role: Role | None = None


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
