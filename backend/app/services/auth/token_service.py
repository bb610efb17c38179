"""Signing and verification of access and refresh tokens (JWT)."""

import hashlib
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import jwt

from app.config import Settings
from app.models.user import User
from app.services.auth.clock import utcnow
from app.services.auth.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TTL = timedelta(days=7)

_DURATION_RE = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_duration(value: str, default: timedelta = DEFAULT_REFRESH_TTL) -> timedelta:
    """Parse a duration string such as ``"7d"``, ``"24h"``, ``"30m"`` or ``"45s"``.

    Anything unparseable yields ``default``.
    """
    match = _DURATION_RE.match(value.strip())
    if not match:
        logger.warning(f"Unparseable duration {value!r}, using {default}")
        return default
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a token, used for ledger lookups only."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedRefreshToken:
    """A freshly signed refresh token and what the ledger needs to store for it."""

    token: str
    token_hash: str
    expires_at: datetime


class TokenService:
    """Creates and verifies signed tokens. Never touches the database."""

    def __init__(self, settings: Settings) -> None:
        self._access_secret = settings.jwt_secret_key
        self._refresh_secret = settings.effective_refresh_token_secret
        self._algorithm = settings.jwt_algorithm
        self.access_ttl = timedelta(minutes=settings.access_token_expire_minutes)
        self.refresh_ttl = parse_duration(settings.refresh_token_expires_in)

    def issue_access_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        """Create a short-lived access token carrying identity, role and token version."""
        now = utcnow()
        payload = {
            "sub": user.id,
            "email": user.email,
            "role": str(user.role),
            "tokenVersion": user.token_version or 0,
            "type": "access",
            "iat": now,
            "exp": now + (expires_delta or self.access_ttl),
        }
        return jwt.encode(payload, self._access_secret, algorithm=self._algorithm)

    def issue_refresh_token(
        self, user: User, expires_delta: timedelta | None = None
    ) -> IssuedRefreshToken:
        """Create a long-lived refresh token with a random ``jti``.

        Returns the raw token with its hash and absolute expiry; persisting
        them is the ledger's job.
        """
        now = utcnow()
        expires_at = now + (expires_delta or self.refresh_ttl)
        payload = {
            "sub": user.id,
            "tokenVersion": user.token_version or 0,
            "jti": secrets.token_hex(32),
            "type": "refresh",
            "iat": now,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._refresh_secret, algorithm=self._algorithm)
        return IssuedRefreshToken(token=token, token_hash=hash_token(token), expires_at=expires_at)

    def verify(self, token: str, secret: str) -> dict[str, Any]:
        """Decode a token, checking signature and expiry.

        Raises:
            InvalidTokenError: If the token is malformed, forged or expired.
        """
        try:
            return jwt.decode(token, secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError as e:
            logger.debug("Token expired")
            raise InvalidTokenError("Token expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid token: {e}")
            raise InvalidTokenError("Invalid token") from e

    def verify_access_token(self, token: str) -> dict[str, Any]:
        """Verify an access token against the primary secret."""
        payload = self.verify(token, self._access_secret)
        if payload.get("type") != "access":
            raise InvalidTokenError("Not an access token")
        return payload

    def verify_refresh_token(self, token: str) -> dict[str, Any]:
        """Verify a refresh token against the refresh secret."""
        payload = self.verify(token, self._refresh_secret)
        if payload.get("type") != "refresh":
            raise InvalidTokenError("Not a refresh token")
        return payload
