"""Dependencies that hand out the services built in ``create_app``."""

from fastapi import BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from app.config import Settings
from app.database import get_db
from app.services.auth.passwords import PasswordHasher
from app.services.auth.session_service import SessionService
from app.services.auth.token_service import TokenService
from app.services.email_service import EmailService
from app.services.security_audit_service import SecurityAuditService
from app.services.user_service import UserService


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_email_service(request: Request) -> EmailService:
    return request.app.state.email_service


def get_session_service(
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
    mailer: EmailService = Depends(get_email_service),
) -> SessionService:
    """Session service bound to this request's DB session.

    Mail is queued on the response's background tasks.
    """
    return SessionService(
        db,
        tokens,
        hasher,
        mailer,
        defer=background_tasks.add_task,
        client_info=SecurityAuditService.get_request_info(request),
    )


def get_user_service(
    db: Session = Depends(get_db),
    sessions: SessionService = Depends(get_session_service),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> UserService:
    return UserService(db, sessions, hasher)
