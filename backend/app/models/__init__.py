"""SQLAlchemy ORM models."""

from app.models.event import Event
from app.models.refresh_token import RefreshToken
from app.models.security_audit_log import SecurityAuditLog
from app.models.user import User
from app.models.verification_token import VerificationToken

__all__ = [
    "Event",
    "RefreshToken",
    "SecurityAuditLog",
    "User",
    "VerificationToken",
]
