"""Service for logging security events."""

import logging
from typing import Any

from fastapi import Request
from sqlalchemy.orm import Session

from app.models.security_audit_log import SecurityAuditLog

logger = logging.getLogger(__name__)


class SecurityEventType:
    """Constants for security event types."""

    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGOUT = "logout"
    REGISTERED = "registered"
    EMAIL_VERIFIED = "email_verified"
    TOKEN_REFRESHED = "token_refreshed"
    REFRESH_TOKEN_REUSE = "refresh_token_reuse"
    REFRESH_TOKEN_MISMATCH = "refresh_token_mismatch"
    TOKEN_VERSION_MISMATCH = "token_version_mismatch"
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    CREDENTIALS_CHANGED = "credentials_changed"
    ADMIN_BOOTSTRAPPED = "admin_bootstrapped"


class SecurityAuditService:
    """Service for recording security audit events."""

    @staticmethod
    def log_event(
        db: Session,
        event_type: str,
        user_id: str | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Stage a security event row. The caller commits the transaction."""
        db.add(
            SecurityAuditLog(
                user_id=user_id,
                event_type=event_type,
                ip_address=ip_address,
                user_agent=user_agent,
                details=details or None,
            )
        )

        # Also log to application logger for monitoring
        logger.info(f"Security event: {event_type} | user_id={user_id} | ip={ip_address}")

    @staticmethod
    def get_request_info(request: Request | None) -> tuple[str | None, str | None]:
        """Extract IP address and user agent from a FastAPI request."""
        if request is None:
            return None, None

        ip_address = None
        # Get IP from X-Forwarded-For header (if behind proxy) or client host
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            ip_address = forwarded_for.split(",")[0].strip()
        elif request.client:
            ip_address = request.client.host

        user_agent = request.headers.get("User-Agent", "")[:500] or None
        return ip_address, user_agent
