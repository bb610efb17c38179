"""Application constants to avoid magic strings."""

from enum import StrEnum


class UserRole(StrEnum):
    """Roles a user account can hold."""

    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"


class AuthProvider(StrEnum):
    """Where an account's credentials live."""

    LOCAL = "LOCAL"
    GOOGLE = "GOOGLE"
    FACEBOOK = "FACEBOOK"
    APPLE = "APPLE"


class VerificationTokenType(StrEnum):
    """Single-use credential workflow token types."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


# Cookie names shared by the auth router and the access guard
ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"

EMAIL_VERIFICATION_TTL_HOURS = 24
PASSWORD_RESET_TTL_HOURS = 1
