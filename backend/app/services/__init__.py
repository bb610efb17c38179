"""Business logic for accounts, sessions and tokens.

- auth/: login, registration, verification, reset and refresh rotation
- repositories/: user and verification token queries

The repositories are re-exported here:
    from app.services import UserRepository, DuplicateError
"""

from app.services.repositories import (
    DuplicateError,
    RepositoryError,
    UserRepository,
    VerificationTokenRepository,
)

__all__ = [
    "DuplicateError",
    "RepositoryError",
    "UserRepository",
    "VerificationTokenRepository",
]
