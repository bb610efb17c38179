"""Query helpers over the account tables.

Services call these instead of building SQLAlchemy queries themselves.
Repositories stage changes and flush; committing is left to the caller.
"""

from .exceptions import DuplicateError, RepositoryError
from .user_repository import UserRepository
from .verification_token_repository import VerificationTokenRepository

__all__ = [
    "DuplicateError",
    "RepositoryError",
    "UserRepository",
    "VerificationTokenRepository",
]
