"""Authentication dependencies for protected routes."""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.constants import ACCESS_TOKEN_COOKIE
from app.database import get_db
from app.dependencies.services import get_token_service
from app.models.user import User
from app.services.auth.exceptions import InvalidTokenError, Unauthorized
from app.services.auth.token_service import TokenService
from app.services.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentIdentity:
    """The authenticated caller, as established by the access token."""

    sub: str
    user_id: str
    email: str
    role: str


def extract_access_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """Access token from the ``access_token`` cookie, else from the Bearer header."""
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    if credentials is not None:
        return credentials.credentials
    return None


def _resolve_identity(token: str, db: Session, tokens: TokenService) -> CurrentIdentity:
    try:
        payload = tokens.verify_access_token(token)
    except InvalidTokenError as e:
        raise Unauthorized("Invalid or expired token") from e

    user = UserRepository(db).find_active_by_id(payload.get("sub"))
    if user is None:
        raise Unauthorized("User not found or inactive")

    if payload.get("tokenVersion") != user.token_version:
        logger.info(f"Rejected access token with stale version for user {user.id}")
        raise Unauthorized("Token has been revoked")

    return CurrentIdentity(sub=user.id, user_id=user.id, email=user.email, role=user.role)


def get_current_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity:
    """
    Require a valid access token.

    Usage:
        @router.get("/protected")
        def protected_route(identity: CurrentIdentity = Depends(get_current_identity)):
            return {"user_id": identity.user_id}
    """
    token = extract_access_token(request, credentials)
    if not token:
        raise Unauthorized()

    identity = _resolve_identity(token, db, tokens)
    request.state.identity = identity
    return identity


def get_optional_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> CurrentIdentity | None:
    """
    Identify the caller if they sent a usable access token, None otherwise.
    Used by public routes, where a bad token is treated as no token.
    """
    token = extract_access_token(request, credentials)
    if not token:
        return None

    try:
        identity = _resolve_identity(token, db, tokens)
    except Unauthorized:
        return None

    request.state.identity = identity
    return identity


def get_current_user(
    identity: CurrentIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> User:
    """Load the ORM row of the authenticated caller."""
    user = UserRepository(db).find_by_id(identity.user_id)
    if user is None:
        raise Unauthorized("User not found or inactive")
    return user
