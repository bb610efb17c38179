"""Tests for the refresh token cleanup script."""

from datetime import UTC, datetime, timedelta

from app.models.refresh_token import RefreshToken
from app.models.user import User
from scripts.cleanup_refresh_tokens import cleanup_refresh_tokens

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _token(user_id: str, name: str, expires_in: timedelta, revoked_ago: timedelta | None = None):
    return RefreshToken(
        user_id=user_id,
        token_hash=name.ljust(64, "0"),
        expires_at=NOW + expires_in,
        revoked_at=NOW - revoked_ago if revoked_ago is not None else None,
    )


def test_cleanup_refresh_tokens(db_session):
    user = User(email="test@example.com", nick="tester")
    db_session.add(user)
    db_session.flush()
    db_session.add_all(
        [
            _token(user.id, "live", timedelta(days=3)),
            _token(user.id, "expired", timedelta(seconds=-1)),
            _token(user.id, "revoked6d", timedelta(days=3), revoked_ago=timedelta(days=6)),
            _token(user.id, "revoked8d", timedelta(days=3), revoked_ago=timedelta(days=8)),
        ]
    )
    db_session.commit()

    deleted = cleanup_refresh_tokens(db_session, retention_days=7, now=NOW)

    assert deleted == 2
    remaining = sorted(row.token_hash.rstrip("0") for row in db_session.query(RefreshToken).all())
    assert remaining == ["live", "revoked6d"]


def test_shorter_retention(db_session):
    user = User(email="test@example.com", nick="tester")
    db_session.add(user)
    db_session.flush()
    db_session.add(_token(user.id, "revoked6d", timedelta(days=3), revoked_ago=timedelta(days=6)))
    db_session.commit()

    assert cleanup_refresh_tokens(db_session, retention_days=1, now=NOW) == 1
