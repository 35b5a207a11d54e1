"""Authentication API endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pizzeria.api.dependencies import get_current_user, get_email_service
from pizzeria.database import get_db
from pizzeria.models.user import User
from pizzeria.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ProfileUpdate,
    ResetPasswordRequest,
    UserLogin,
    UserRegister,
    UserResponse,
)
from pizzeria.schemas.common import ApiResponse, MessageResponse
from pizzeria.services.auth import (
    authenticate_user,
    create_access_token,
    create_user,
    get_user_by_email,
    issue_password_reset,
    reset_password,
    verify_email_token,
)
from pizzeria.services.email_service import EmailService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    access_token = create_access_token(user.id, user.email, user.role.value)
    return AuthResponse(access_token=access_token, user=UserResponse.model_validate(user))


@router.post(
    "/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED
)
def register(
    user_data: UserRegister,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """Register a new user."""
    # Check if user already exists
    existing_user = get_user_by_email(db, user_data.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    user = create_user(
        db,
        user_data.email,
        user_data.password,
        user_data.name,
        phone=user_data.phone,
        address=user_data.address.model_dump() if user_data.address else None,
    )
    logger.info(f"Registered user {user.id}")

    try:
        email_service.send_welcome(user)
    except Exception as e:
        logger.warning(f"Failed to send welcome email to user {user.id}: {e}")

    return ApiResponse(message="Registration successful", data=_auth_response(user))


@router.post("/login", response_model=ApiResponse[AuthResponse])
def login(
    credentials: UserLogin,
    db: Annotated[Session, Depends(get_db)],
):
    """Login with email and password."""
    user = authenticate_user(db, credentials.email, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return ApiResponse(message="Login successful", data=_auth_response(user))


@router.get("/me", response_model=ApiResponse[UserResponse])
def get_me(
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Get current user information."""
    return ApiResponse(
        message="User retrieved successfully", data=UserResponse.model_validate(current_user)
    )


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    profile: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
):
    """Update name, phone or address."""
    changes = profile.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return ApiResponse(
        message="Profile updated successfully", data=UserResponse.model_validate(current_user)
    )


@router.get("/verify-email/{token}", response_model=MessageResponse)
def verify_email(
    token: str,
    db: Annotated[Session, Depends(get_db)],
):
    """Confirm an email address from the welcome link."""
    user = verify_email_token(db, token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token",
        )
    return MessageResponse(message="Email verified successfully")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    request: ForgotPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """Send a reset link. The response does not reveal whether the account exists."""
    user = get_user_by_email(db, request.email)
    if user:
        token = issue_password_reset(db, user)
        try:
            email_service.send_password_reset(user, token)
        except Exception as e:
            logger.warning(f"Failed to send password reset email to user {user.id}: {e}")

    return MessageResponse(
        message="If an account exists for this email, a password reset link has been sent"
    )


@router.post("/reset-password/{token}", response_model=MessageResponse)
def reset_password_with_token(
    token: str,
    request: ResetPasswordRequest,
    db: Annotated[Session, Depends(get_db)],
):
    """Set a new password with a reset token."""
    user = reset_password(db, token, request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token",
        )
    return MessageResponse(message="Password reset successfully")
