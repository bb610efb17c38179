"""Session lifecycle: login, registration, verification, password reset, refresh rotation."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants import (
    EMAIL_VERIFICATION_TTL_HOURS,
    PASSWORD_RESET_TTL_HOURS,
    AuthProvider,
    UserRole,
    VerificationTokenType,
)
from app.models.user import User
from app.models.verification_token import VerificationToken
from app.services.auth.clock import is_past, utcnow
from app.services.auth.exceptions import (
    AlreadyVerified,
    DuplicateEmail,
    DuplicateNick,
    EmailNotVerified,
    InvalidCredentials,
    InvalidOrExpiredToken,
    InvalidRefreshToken,
    InvalidTokenError,
    TokenExpired,
    TokenRevoked,
    UnsupportedProvider,
    UserInactiveOrMissing,
    UserNotFound,
)
from app.services.auth.passwords import PasswordHasher
from app.services.auth.refresh_token_ledger import RefreshTokenLedger
from app.services.auth.token_service import TokenService, hash_token
from app.services.email_service import EmailService
from app.services.repositories.exceptions import DuplicateError
from app.services.repositories.user_repository import UserRepository
from app.services.repositories.verification_token_repository import (
    VerificationTokenRepository,
)
from app.services.security_audit_service import SecurityAuditService, SecurityEventType

logger = logging.getLogger(__name__)

REGISTER_MESSAGE = "Registration successful. Please check your email to verify your account."
RESEND_VERIFICATION_MESSAGE = "Verification email sent. Please check your inbox."
FORGOT_PASSWORD_MESSAGE = "If that email exists, we sent a password reset link."
RESET_PASSWORD_MESSAGE = "Password reset successful. You can now log in with your new password."


def _run_now(func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    func(*args, **kwargs)


@dataclass(frozen=True)
class AuthResult:
    """Tokens issued for an authenticated session."""

    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    user: User


class SessionService:
    """Orchestrates the credential and session workflows.

    This is the only writer of the refresh token ledger and of verification
    tokens, and the owner of the token-version counter. Each public method
    runs in one transaction on ``db`` and commits before returning (or
    before raising, when the failure itself has to be persisted).

    Mail is handed to ``defer`` (FastAPI's ``BackgroundTasks.add_task`` in
    the routers) so responses never wait on, or fail because of, the mail
    provider.
    """

    def __init__(
        self,
        db: Session,
        tokens: TokenService,
        hasher: PasswordHasher,
        mailer: EmailService,
        defer: Callable[..., Any] = _run_now,
        client_info: tuple[str | None, str | None] = (None, None),
    ) -> None:
        self._db = db
        self._tokens = tokens
        self._hasher = hasher
        self._mailer = mailer
        self._defer = defer
        self._ip_address, self._user_agent = client_info
        self._users = UserRepository(db)
        self._verification = VerificationTokenRepository(db)
        self._ledger = RefreshTokenLedger(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _audit(self, event_type: str, user_id: str | None = None, **details: Any) -> None:
        SecurityAuditService.log_event(
            self._db,
            event_type,
            user_id=user_id,
            ip_address=self._ip_address,
            user_agent=self._user_agent,
            details=details,
        )

    def _start_session(self, user: User) -> AuthResult:
        """Issue an access/refresh pair and record the refresh token. Caller commits."""
        issued = self._tokens.issue_refresh_token(user)
        self._ledger.record(user.id, issued)
        return AuthResult(
            access_token=self._tokens.issue_access_token(user),
            refresh_token=issued.token,
            refresh_expires_at=issued.expires_at,
            user=user,
        )

    def _find_live_token(
        self, token: str, token_type: VerificationTokenType
    ) -> VerificationToken:
        record = self._verification.find_by_token(token)
        if record is None or record.type != token_type or is_past(record.expires_at):
            raise InvalidOrExpiredToken()
        return record

    def _reject_login(self, reason: str, user: User | None) -> None:
        self._audit(SecurityEventType.LOGIN_FAILED, user_id=user.id if user else None, reason=reason)
        self._db.commit()
        raise InvalidCredentials()

    def _revoke_family(self, user_id: str, event_type: str) -> None:
        """Delete every refresh token of a user and persist that immediately."""
        self._ledger.delete_for_user(user_id)
        self._audit(event_type, user_id=user_id)
        self._db.commit()

    def send_email_verification(self, user: User) -> None:
        """Replace the user's email verification token and queue the mail. Caller commits."""
        token = self._verification.issue(
            user.id,
            VerificationTokenType.EMAIL_VERIFICATION,
            timedelta(hours=EMAIL_VERIFICATION_TTL_HOURS),
        )
        self._defer(self._mailer.send_verification_email, user.email, user.nick, token)

    def bump_token_version(self, user: User) -> None:
        """Invalidate every access and refresh token issued to ``user``.

        Shared with the profile-update handler. The caller commits.
        """
        user.token_version = User.token_version + 1
        self._db.flush()
        self._ledger.delete_for_user(user.id)

    # ------------------------------------------------------------------
    # Credential workflows
    # ------------------------------------------------------------------

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Raises:
            InvalidCredentials: For unknown, password-less, inactive or
                unverified accounts and for wrong passwords.
        """
        user = self._users.find_by_email(email)
        if user is None or not user.password_hash:
            # Keep timing in line with the real check so the response does not reveal the account
            self._hasher.dummy_verify(password)
            self._reject_login("unknown_or_external_account", user)

        if not self._hasher.verify(password, user.password_hash):
            self._reject_login("invalid_password", user)

        if not user.is_active:
            self._reject_login("inactive", user)
        if user.requires_email_verification:
            self._reject_login("email_not_verified", user)

        result = self._start_session(user)
        self._audit(SecurityEventType.LOGIN_SUCCESS, user_id=user.id)
        self._db.commit()

        logger.info(f"User logged in: {user.id}")
        return result

    def register(self, email: str, nick: str, password: str) -> str:
        """Create an unverified LOCAL account and mail a verification link.

        Raises:
            DuplicateEmail: If the email is taken.
            DuplicateNick: If the nick is taken.
        """
        email = email.lower()
        try:
            self._users.ensure_unique(email=email, nick=nick)
        except DuplicateError as e:
            raise (DuplicateEmail() if e.field == "email" else DuplicateNick()) from e

        user = self._users.add(
            User(
                email=email,
                nick=nick,
                password_hash=self._hasher.hash(password),
                role=UserRole.USER,
                provider=AuthProvider.LOCAL,
                email_verified=False,
            )
        )
        self.send_email_verification(user)
        self._audit(SecurityEventType.REGISTERED, user_id=user.id)
        try:
            self._db.commit()
        except IntegrityError as e:
            # Lost a race against a concurrent registration with the same email or nick
            self._db.rollback()
            raise DuplicateEmail("Email or nick already registered") from e

        logger.info(f"User registered (pending verification): {user.id}")
        return REGISTER_MESSAGE

    def verify_email(self, token: str) -> AuthResult:
        """Consume an email verification token and log the user in.

        Raises:
            InvalidOrExpiredToken: If the token is unknown, of another type, or expired.
        """
        record = self._find_live_token(token, VerificationTokenType.EMAIL_VERIFICATION)
        user = record.user
        user.email_verified = True
        user.email_verified_at = utcnow()
        self._verification.delete(record)

        result = self._start_session(user)
        self._audit(SecurityEventType.EMAIL_VERIFIED, user_id=user.id)
        self._db.commit()

        self._defer(self._mailer.send_welcome_email, user.email, user.nick)
        logger.info(f"Email verified for user: {user.id}")
        return result

    def resend_verification(self, email: str) -> str:
        """Replace the user's verification token and mail it again.

        Raises:
            UserNotFound: If no account has this email.
            AlreadyVerified: If the email is already verified.
            UnsupportedProvider: If the account is not a LOCAL one.
        """
        user = self._users.find_by_email(email)
        if user is None:
            raise UserNotFound()
        if user.email_verified:
            raise AlreadyVerified()
        if user.provider != AuthProvider.LOCAL:
            raise UnsupportedProvider()

        self.send_email_verification(user)
        self._db.commit()

        logger.info(f"Verification email resent for user: {user.id}")
        return RESEND_VERIFICATION_MESSAGE

    def forgot_password(self, email: str) -> str:
        """Start a password reset.

        Returns the same message whether or not the account exists, and the
        mail itself is sent after the response, so neither the body nor the
        timing tells an observer whether the email is registered.
        """
        user = self._users.find_by_email(email)
        if user is not None and user.provider == AuthProvider.LOCAL:
            token = self._verification.issue(
                user.id,
                VerificationTokenType.PASSWORD_RESET,
                timedelta(hours=PASSWORD_RESET_TTL_HOURS),
            )
            self._audit(SecurityEventType.PASSWORD_RESET_REQUESTED, user_id=user.id)
            self._db.commit()
            self._defer(self._mailer.send_password_reset_email, user.email, user.nick, token)
            logger.info(f"Password reset requested for user: {user.id}")

        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, token: str, new_password: str) -> str:
        """Set a new password from a reset token and end every existing session.

        Raises:
            InvalidOrExpiredToken: If the token is unknown, of another type, or expired.
        """
        record = self._find_live_token(token, VerificationTokenType.PASSWORD_RESET)
        user = record.user
        user.password_hash = self._hasher.hash(new_password)
        self.bump_token_version(user)
        self._verification.delete(record)
        self._audit(SecurityEventType.PASSWORD_RESET_COMPLETED, user_id=user.id)
        self._db.commit()

        logger.info(f"Password reset for user: {user.id}")
        return RESET_PASSWORD_MESSAGE

    # ------------------------------------------------------------------
    # Refresh token rotation
    # ------------------------------------------------------------------

    def refresh(self, raw_refresh_token: str) -> AuthResult:
        """Exchange a refresh token for a new access/refresh pair.

        Each refresh token is single use. Presenting one that was already
        rotated is treated as theft: every refresh token of that user is
        deleted.

        Raises:
            InvalidRefreshToken: Bad signature, unknown token, subject
                mismatch, or stale token version.
            TokenRevoked: The token was already rotated (reuse).
            TokenExpired: The ledger row has expired.
            UserInactiveOrMissing: The user is gone or disabled.
            EmailNotVerified: The LOCAL user has not verified their email.
        """
        try:
            payload = self._tokens.verify_refresh_token(raw_refresh_token)
        except InvalidTokenError as e:
            raise InvalidRefreshToken() from e

        token_hash = hash_token(raw_refresh_token)
        row = self._ledger.find_by_hash(token_hash)
        if row is None:
            raise InvalidRefreshToken()

        subject = payload.get("sub")
        if row.user_id != subject:
            self._ledger.delete_by_hash(token_hash)
            self._audit(SecurityEventType.REFRESH_TOKEN_MISMATCH, user_id=row.user_id)
            self._db.commit()
            raise InvalidRefreshToken()

        if row.revoked_at is not None:
            logger.warning(f"Rotated refresh token replayed for user {row.user_id}")
            self._revoke_family(row.user_id, SecurityEventType.REFRESH_TOKEN_REUSE)
            raise TokenRevoked()

        now = utcnow()
        if is_past(row.expires_at, now):
            self._ledger.delete_by_hash(token_hash)
            self._db.commit()
            raise TokenExpired()

        user = self._users.find_by_id(subject)
        if user is None or not user.is_active:
            raise UserInactiveOrMissing()
        if user.requires_email_verification:
            raise EmailNotVerified()

        if payload.get("tokenVersion") != user.token_version:
            self._revoke_family(user.id, SecurityEventType.TOKEN_VERSION_MISMATCH)
            raise InvalidRefreshToken()

        issued = self._tokens.issue_refresh_token(user)
        if not self._ledger.mark_rotated(row, issued.token_hash, now):
            # A concurrent request rotated this token first
            logger.warning(f"Concurrent rotation of one refresh token for user {user.id}")
            self._revoke_family(user.id, SecurityEventType.REFRESH_TOKEN_REUSE)
            raise TokenRevoked()
        try:
            self._ledger.record(user.id, issued)
            self._audit(SecurityEventType.TOKEN_REFRESHED, user_id=user.id)
            self._db.commit()
        except IntegrityError as e:
            self._db.rollback()
            raise InvalidRefreshToken() from e

        return AuthResult(
            access_token=self._tokens.issue_access_token(user),
            refresh_token=issued.token,
            refresh_expires_at=issued.expires_at,
            user=user,
        )

    def logout(self, raw_refresh_token: str) -> None:
        """Forget a refresh token. Unknown tokens are ignored."""
        row = self._ledger.find_by_token(raw_refresh_token)
        if row is None:
            return
        self._ledger.delete_by_hash(row.token_hash)
        self._audit(SecurityEventType.LOGOUT, user_id=row.user_id)
        self._db.commit()
