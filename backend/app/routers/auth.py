"""Authentication router."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials

from app.config import Settings
from app.constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from app.dependencies.auth import security
from app.dependencies.services import get_session_service, get_settings, get_token_service
from app.rate_limiter import EMAIL_DISPATCH_LIMIT, LOGIN_LIMIT, REGISTER_LIMIT, limiter
from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ResendVerificationRequest,
    ResetPasswordRequest,
    UserBasic,
    UserLogin,
    UserRegister,
    VerifyEmailRequest,
)
from app.schemas.common import MessageResponse
from app.services.auth.exceptions import Unauthorized
from app.services.auth.session_service import AuthResult, SessionService
from app.services.auth.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _set_auth_cookies(
    response: Response, result: AuthResult, settings: Settings, tokens: TokenService
) -> None:
    cookie_options = {
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        result.access_token,
        max_age=int(tokens.access_ttl.total_seconds()),
        **cookie_options,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        result.refresh_token,
        max_age=int(tokens.refresh_ttl.total_seconds()),
        **cookie_options,
    )


def _auth_response(
    response: Response, result: AuthResult, settings: Settings, tokens: TokenService
) -> dict:
    _set_auth_cookies(response, result, settings, tokens)
    return {
        "access_token": result.access_token,
        "refresh_token": result.refresh_token,
        "token_type": "bearer",
        "user": UserBasic.model_validate(result.user),
    }


def _extract_refresh_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str:
    """Refresh token from the ``refresh_token`` cookie, else from the Bearer header.

    Cookie clients may still send their access token as Bearer, so the
    cookie wins, the same order the access guard uses.
    """
    cookie_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    raise Unauthorized("Refresh token missing")


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request,
    data: UserRegister,
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Register a new user and send verification email."""
    return {"message": sessions.register(data.email, data.nick, data.password)}


@router.post("/login", response_model=AuthResponse)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    response: Response,
    data: UserLogin,
    sessions: SessionService = Depends(get_session_service),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Login and get access/refresh tokens."""
    result = sessions.login(data.email, data.password)
    return _auth_response(response, result, settings, tokens)


@router.post("/verify-email", response_model=AuthResponse)
def verify_email(
    response: Response,
    data: VerifyEmailRequest,
    sessions: SessionService = Depends(get_session_service),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Verify email with token from email link and log the user in."""
    result = sessions.verify_email(data.token)
    return _auth_response(response, result, settings, tokens)


@router.post("/resend-verification", response_model=MessageResponse)
@limiter.limit(EMAIL_DISPATCH_LIMIT)
def resend_verification(
    request: Request,
    data: ResendVerificationRequest,
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Resend the verification email."""
    return {"message": sessions.resend_verification(data.email)}


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit(EMAIL_DISPATCH_LIMIT)
def forgot_password(
    request: Request,
    data: ForgotPasswordRequest,
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Request password reset email.

    Always returns the same response to prevent email enumeration.
    """
    return {"message": sessions.forgot_password(data.email)}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    data: ResetPasswordRequest,
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Reset password using token from email. Ends every session of the user."""
    return {"message": sessions.reset_password(data.token, data.new_password)}


@router.post("/refresh", response_model=AuthResponse)
def refresh_tokens(
    request: Request,
    response: Response,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    sessions: SessionService = Depends(get_session_service),
    tokens: TokenService = Depends(get_token_service),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Exchange a refresh token for a new access/refresh pair."""
    raw_token = _extract_refresh_token(request, credentials)
    result = sessions.refresh(raw_token)
    return _auth_response(response, result, settings, tokens)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    response: Response,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    sessions: SessionService = Depends(get_session_service),
) -> dict:
    """Logout and forget the refresh token."""
    raw_token = _extract_refresh_token(request, credentials)
    sessions.logout(raw_token)
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)
    return {"message": "Successfully logged out"}
