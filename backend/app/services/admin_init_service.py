"""Bootstrap of the initial administrator account."""

import logging

from sqlalchemy.orm import Session

from app.config import Settings
from app.constants import AuthProvider, UserRole
from app.models.user import User
from app.services.auth.clock import utcnow
from app.services.auth.passwords import PasswordHasher
from app.services.repositories.user_repository import UserRepository
from app.services.security_audit_service import SecurityAuditService, SecurityEventType

logger = logging.getLogger(__name__)


def ensure_admin_user(db: Session, settings: Settings, hasher: PasswordHasher) -> User | None:
    """Create the configured ADMIN account if it does not exist yet.

    Idempotent. An existing admin whose email is still unverified is marked
    verified. Nothing happens when ``ADMIN_EMAIL``, ``ADMIN_NICK`` or
    ``ADMIN_PASSWORD`` is missing.

    Returns:
        The admin user, or None if bootstrap is not configured.
    """
    if not (settings.admin_email and settings.admin_nick and settings.admin_password):
        logger.warning(
            "Admin bootstrap skipped: set ADMIN_EMAIL, ADMIN_NICK and ADMIN_PASSWORD to create one"
        )
        return None

    users = UserRepository(db)
    existing = users.find_by_email(settings.admin_email)
    if existing is not None:
        if existing.role != UserRole.ADMIN:
            logger.warning(
                f"Admin bootstrap: {existing.id} uses the admin email but has role {existing.role}"
            )
        if not existing.email_verified:
            existing.email_verified = True
            existing.email_verified_at = utcnow()
            db.commit()
            logger.info(f"Admin user marked as verified: {existing.id}")
        else:
            logger.info(f"Admin user already exists: {existing.id}")
        return existing

    admin = users.add(
        User(
            email=settings.admin_email.lower(),
            nick=settings.admin_nick,
            password_hash=hasher.hash(settings.admin_password),
            role=UserRole.ADMIN,
            provider=AuthProvider.LOCAL,
            email_verified=True,
            email_verified_at=utcnow(),
        )
    )
    SecurityAuditService.log_event(db, SecurityEventType.ADMIN_BOOTSTRAPPED, user_id=admin.id)
    db.commit()

    logger.info(f"Created admin user: {admin.id}")
    return admin


def run_admin_bootstrap(db: Session, settings: Settings, hasher: PasswordHasher) -> None:
    """Startup hook around ``ensure_admin_user``. Failures are logged, never raised."""
    try:
        ensure_admin_user(db, settings, hasher)
    except Exception:
        db.rollback()
        logger.exception("Admin bootstrap failed")
