"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pizzeria.models.enums import UserRole


class Address(BaseModel):
    """Postal address used for profiles and deliveries."""

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: str = Field(..., min_length=3, max_length=12)
    landmark: str | None = Field(None, max_length=255)


class UserRegister(BaseModel):
    """User registration request."""

    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    phone: str | None = Field(None, pattern=r"^\+?[0-9]{10,15}$")
    address: Address | None = None


class UserLogin(BaseModel):
    """User login request."""

    email: EmailStr = Field(..., max_length=255)
    password: str = Field(..., min_length=1, max_length=128)


class ForgotPasswordRequest(BaseModel):
    """Request a password reset email."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Set a new password using a reset token."""

    password: str = Field(..., min_length=8, max_length=128)


class ProfileUpdate(BaseModel):
    """Update the caller's profile."""

    name: str | None = Field(None, min_length=2, max_length=255)
    phone: str | None = Field(None, pattern=r"^\+?[0-9]{10,15}$")
    address: Address | None = None


class UserResponse(BaseModel):
    """User information response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    phone: str | None
    address: Address | None
    role: UserRole
    is_email_verified: bool


class AuthResponse(BaseModel):
    """Authentication response with token and user info."""

    access_token: str
    token_type: str = "bearer"  # noqa: S105
    user: UserResponse
