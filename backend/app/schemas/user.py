"""Schemas for user profile endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.constants import UserRole
from app.schemas.auth import NICK_PATTERN, _validate_password_strength


class UserResponse(BaseModel):
    """Public view of a user account."""

    id: str
    email: str
    nick: str
    role: str
    provider: str
    is_active: bool
    email_verified: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    """Partial profile update. Only admins may set ``role``."""

    email: EmailStr | None = None
    nick: str | None = Field(None, min_length=3, max_length=30, pattern=NICK_PATTERN)
    password: str | None = Field(None, min_length=8, max_length=100)
    role: UserRole | None = None

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _validate_password_strength(v)
