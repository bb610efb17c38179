"""Pydantic schemas for API validation."""

from app.schemas.admin import AdminStats, RefreshTokenCleanupResponse
from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    UserBasic,
    UserLogin,
    UserRegister,
    VerifyEmailRequest,
)
from app.schemas.common import MessageResponse, PaginatedResponse
from app.schemas.event import Event, EventCreate, EventPublish, EventUpdate
from app.schemas.user import UserResponse, UserUpdate

__all__ = [
    "AdminStats",
    "AuthResponse",
    "Event",
    "EventCreate",
    "EventPublish",
    "EventUpdate",
    "ForgotPasswordRequest",
    "MessageResponse",
    "PaginatedResponse",
    "RefreshTokenCleanupResponse",
    "ResendVerificationRequest",
    "ResetPasswordRequest",
    "UserBasic",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
    "VerifyEmailRequest",
]
