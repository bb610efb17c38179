"""Authentication services.

Token signing, password hashing and the auth error taxonomy. The session
workflows live in ``app.services.auth.session_service`` and are imported
from there directly, since they depend on the repositories package.
"""

from .exceptions import AuthError, InvalidTokenError
from .passwords import PasswordHasher
from .token_service import TokenService, hash_token, parse_duration

__all__ = [
    "AuthError",
    "InvalidTokenError",
    "PasswordHasher",
    "TokenService",
    "hash_token",
    "parse_duration",
]
