"""Authentication and authorization errors.

Every error carries the HTTP status it maps to and a message that is safe to
show to clients. ``app.main`` registers a single handler for ``AuthError``.
"""

from fastapi import status


class AuthError(Exception):
    """Base class for auth failures surfaced to HTTP clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Authentication error"
    headers: dict[str, str] | None = None

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCredentials(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid email or password"


class DuplicateEmail(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Email already registered"


class DuplicateNick(AuthError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Nick already taken"


class InvalidOrExpiredToken(AuthError):
    """Verification or password reset token is unknown, of the wrong type, or expired."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid or expired token"


class AlreadyVerified(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Email already verified"


class UnsupportedProvider(AuthError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Email verification is only available for local accounts"


class UserNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "User not found"


class InvalidRefreshToken(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid refresh token"


class TokenRevoked(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Refresh token has been revoked"


class TokenExpired(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Refresh token has expired"


class UserInactiveOrMissing(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "User not found or inactive"


class EmailNotVerified(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Email not verified"


class Unauthorized(AuthError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"
    headers = {"WWW-Authenticate": "Bearer"}


class Forbidden(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to access this resource"


class ResourceNotFound(AuthError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class InvalidTokenError(Exception):
    """Signature, format or expiry check failed. Internal to the token layer."""
