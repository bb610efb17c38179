"""Persistence of issued refresh tokens: recording, rotation, revocation, cleanup."""

import logging
from datetime import datetime, timedelta

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.models.refresh_token import RefreshToken
from app.services.auth.clock import utcnow
from app.services.auth.token_service import IssuedRefreshToken, hash_token

logger = logging.getLogger(__name__)


class RefreshTokenLedger:
    """Data access for the ``refresh_tokens`` table.

    Rows are keyed by the SHA-256 of the raw token; the raw value is never
    stored. None of these methods commit; the session service owns the
    transaction.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def record(self, user_id: str, issued: IssuedRefreshToken) -> RefreshToken:
        """Store a newly issued refresh token."""
        row = RefreshToken(
            user_id=user_id,
            token_hash=issued.token_hash,
            expires_at=issued.expires_at,
        )
        self._db.add(row)
        self._db.flush()
        return row

    def find_by_token(self, raw_token: str) -> RefreshToken | None:
        """Look up the ledger row for a raw refresh token."""
        return self.find_by_hash(hash_token(raw_token))

    def find_by_hash(self, token_hash: str) -> RefreshToken | None:
        return self._db.query(RefreshToken).filter(RefreshToken.token_hash == token_hash).first()

    def mark_rotated(self, row: RefreshToken, successor_hash: str, now: datetime | None = None) -> bool:
        """Revoke ``row`` and chain it to its successor.

        The update only applies while the row is still unrevoked, so of two
        concurrent rotations of the same token at most one succeeds.

        Returns:
            True if this call revoked the row, False if it was already revoked.
        """
        updated = (
            self._db.query(RefreshToken)
            .filter(RefreshToken.id == row.id, RefreshToken.revoked_at.is_(None))
            .update(
                {
                    RefreshToken.revoked_at: now or utcnow(),
                    RefreshToken.replaced_by_token_hash: successor_hash,
                },
                synchronize_session=False,
            )
        )
        return updated == 1

    def delete_by_hash(self, token_hash: str) -> int:
        """Delete the row(s) for one token hash."""
        return (
            self._db.query(RefreshToken)
            .filter(RefreshToken.token_hash == token_hash)
            .delete(synchronize_session=False)
        )

    def delete_for_user(self, user_id: str) -> int:
        """Delete every refresh token of a user (ends all of their sessions)."""
        deleted = (
            self._db.query(RefreshToken)
            .filter(RefreshToken.user_id == user_id)
            .delete(synchronize_session=False)
        )
        if deleted:
            logger.info(f"Deleted {deleted} refresh token(s) for user {user_id}")
        return deleted

    def cleanup(self, revoked_retention: timedelta, now: datetime | None = None) -> int:
        """Delete expired rows and rows revoked longer than ``revoked_retention`` ago.

        Recently revoked rows are kept so a replayed token is still
        recognised as reuse rather than as an unknown token.
        """
        now = now or utcnow()
        revoked_before = now - revoked_retention
        return (
            self._db.query(RefreshToken)
            .filter(
                or_(
                    RefreshToken.expires_at < now,
                    and_(
                        RefreshToken.revoked_at.is_not(None),
                        RefreshToken.revoked_at < revoked_before,
                    ),
                )
            )
            .delete(synchronize_session=False)
        )
