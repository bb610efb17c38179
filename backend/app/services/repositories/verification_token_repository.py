"""Verification token data access layer."""

import secrets
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.constants import VerificationTokenType
from app.models import VerificationToken
from app.services.auth.clock import utcnow
from app.services.auth.token_service import hash_token


class VerificationTokenRepository:
    """Issue, look up and consume single-use verification tokens."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_token(self, token: str) -> VerificationToken | None:
        """Find a token row by the raw value the user was mailed."""
        return (
            self._db.query(VerificationToken)
            .filter(VerificationToken.token_hash == hash_token(token))
            .first()
        )

    def delete_for_user(self, user_id: str, token_type: VerificationTokenType) -> int:
        """Delete all tokens of one type for a user."""
        return (
            self._db.query(VerificationToken)
            .filter(
                VerificationToken.user_id == user_id,
                VerificationToken.type == token_type,
            )
            .delete(synchronize_session=False)
        )

    def issue(
        self,
        user_id: str,
        token_type: VerificationTokenType,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> str:
        """Replace any live token of this type with a fresh one and return its raw value.

        Only the hash is stored. The caller commits.
        """
        self.delete_for_user(user_id, token_type)
        token = secrets.token_hex(32)
        self._db.add(
            VerificationToken(
                user_id=user_id,
                token_hash=hash_token(token),
                type=token_type,
                expires_at=(now or utcnow()) + ttl,
            )
        )
        # Flushed so a later delete_for_user in the same transaction sees it
        self._db.flush()
        return token

    def delete(self, record: VerificationToken) -> None:
        """Consume a token."""
        self._db.delete(record)
