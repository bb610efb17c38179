"""Schemas for authentication endpoints."""

import re

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

NICK_PATTERN = r"^[a-zA-Z0-9_-]+$"
# bcrypt ignores or rejects anything past this
BCRYPT_MAX_BYTES = 72


def _validate_password_strength(v: str) -> str:
    """Shared password validation logic."""
    if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")

    errors = []
    if not re.search(r"[a-z]", v):
        errors.append("lowercase letter")
    if not re.search(r"[A-Z]", v):
        errors.append("uppercase letter")
    if not re.search(r"\d", v):
        errors.append("number")

    if errors:
        raise ValueError(f"Password must contain at least one: {', '.join(errors)}")
    return v


class UserRegister(BaseModel):
    """Schema for user registration."""

    email: EmailStr
    nick: str = Field(min_length=3, max_length=30, pattern=NICK_PATTERN)
    password: str = Field(min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _validate_password_strength(v)


class UserLogin(BaseModel):
    """Schema for user login."""

    email: str
    password: str


class VerifyEmailRequest(BaseModel):
    token: str = Field(min_length=1)


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Schema for completing a password reset. Accepts ``newPassword`` or ``new_password``."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(min_length=1)
    new_password: str = Field(alias="newPassword", min_length=8, max_length=100)

    @field_validator("new_password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        return _validate_password_strength(v)


class UserBasic(BaseModel):
    """User summary returned with issued tokens."""

    id: str
    email: str
    nick: str
    role: str

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserBasic
