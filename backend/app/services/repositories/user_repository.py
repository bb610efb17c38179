"""User data access layer."""

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.constants import UserRole
from app.models import User

from .exceptions import DuplicateError

logger = logging.getLogger(__name__)


class UserRepository:
    """Centralized user data access.

    Naming conventions:
    - find_* : Query that may return None
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_id(self, user_id: str) -> User | None:
        """Find user by primary key."""
        return self._db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> User | None:
        """Find user by email (case-insensitive)."""
        return self._db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def find_by_nick(self, nick: str) -> User | None:
        """Find user by display name."""
        return self._db.query(User).filter(User.nick == nick).first()

    def find_active_by_id(self, user_id: str) -> User | None:
        """Find active user by ID."""
        return self._db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()

    def ensure_unique(self, email: str | None = None, nick: str | None = None) -> None:
        """Raise DuplicateError if the email or nick is already taken."""
        if email is not None and self.find_by_email(email) is not None:
            raise DuplicateError("User", "email", email)
        if nick is not None and self.find_by_nick(nick) is not None:
            raise DuplicateError("User", "nick", nick)

    def add(self, user: User) -> User:
        """Stage a new user and flush so its ID is assigned."""
        self._db.add(user)
        self._db.flush()
        logger.debug(f"Staged user {user.id}")
        return user

    def count(self, role: UserRole | None = None) -> int:
        """Count users, optionally restricted to one role."""
        query = self._db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        return query.count()
