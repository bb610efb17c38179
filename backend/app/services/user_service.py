"""Profile updates and account deletion."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants import AuthProvider, UserRole
from app.models.user import User
from app.schemas.user import UserUpdate
from app.services.auth.exceptions import DuplicateEmail, DuplicateNick, Forbidden
from app.services.auth.passwords import PasswordHasher
from app.services.auth.session_service import SessionService
from app.services.repositories.user_repository import UserRepository
from app.services.security_audit_service import SecurityAuditService, SecurityEventType

logger = logging.getLogger(__name__)


class UserService:
    """Applies profile changes on behalf of an authenticated actor.

    Changing the email or the password goes through
    ``SessionService.bump_token_version`` so every outstanding token of the
    target user stops working.
    """

    def __init__(self, db: Session, sessions: SessionService, hasher: PasswordHasher) -> None:
        self._db = db
        self._sessions = sessions
        self._hasher = hasher
        self._users = UserRepository(db)

    def update_profile(self, user: User, changes: UserUpdate, actor_role: str) -> User:
        """Apply a partial update to ``user``.

        Raises:
            Forbidden: If a non-admin tries to change a role.
            DuplicateEmail: If the new email belongs to someone else.
            DuplicateNick: If the new nick belongs to someone else.
        """
        data = changes.model_dump(exclude_unset=True, exclude_none=True)

        new_role = data.get("role")
        if new_role is not None and new_role != user.role:
            if actor_role != UserRole.ADMIN:
                raise Forbidden("Only administrators can change roles")
            logger.info(f"Role of user {user.id} changed from {user.role} to {new_role}")
            user.role = new_role

        email_changed = False
        new_email = data.get("email")
        if new_email is not None and new_email.lower() != user.email.lower():
            if self._users.find_by_email(new_email) is not None:
                raise DuplicateEmail()
            user.email = new_email.lower()
            user.email_verified = False
            user.email_verified_at = None
            email_changed = True

        new_nick = data.get("nick")
        if new_nick is not None and new_nick != user.nick:
            if self._users.find_by_nick(new_nick) is not None:
                raise DuplicateNick()
            user.nick = new_nick

        password_changed = "password" in data
        if password_changed:
            user.password_hash = self._hasher.hash(data["password"])

        if email_changed or password_changed:
            self._sessions.bump_token_version(user)
            SecurityAuditService.log_event(
                self._db,
                SecurityEventType.CREDENTIALS_CHANGED,
                user_id=user.id,
                details={"email": email_changed, "password": password_changed},
            )
        if email_changed and user.provider == AuthProvider.LOCAL:
            self._sessions.send_email_verification(user)

        try:
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            raise DuplicateEmail("Email or nick already registered") from e

        self._db.refresh(user)
        return user

    def delete_user(self, user: User) -> None:
        """Delete an account. Its events stay, without an owner."""
        user_id = user.id
        self._db.delete(user)
        self._db.commit()
        logger.info(f"Deleted user {user_id}")
