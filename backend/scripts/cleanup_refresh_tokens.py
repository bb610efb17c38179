"""Delete expired refresh tokens and ones revoked past the retention window.

Meant to run periodically (cron or a scheduler):

    python -m scripts.cleanup_refresh_tokens
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session as DBSession

from app.config import Settings
from app.services.auth.refresh_token_ledger import RefreshTokenLedger

logger = logging.getLogger(__name__)


def cleanup_refresh_tokens(
    db: DBSession, retention_days: int = 7, now: datetime | None = None
) -> int:
    """
    Purge the refresh token ledger.

    Args:
        db: Database session
        retention_days: How long revoked rows are kept so replays are still detected
        now: Reference time (defaults to the current UTC time)

    Returns:
        Number of rows deleted
    """
    deleted = RefreshTokenLedger(db).cleanup(timedelta(days=retention_days), now=now)
    db.commit()
    logger.info(f"Refresh token cleanup removed {deleted} row(s)")
    return deleted


if __name__ == "__main__":
    """Run as standalone script."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    from app.database import create_db_engine, create_session_factory

    settings = Settings()
    engine = create_db_engine(settings.database_url)
    db = create_session_factory(engine)()
    try:
        cleanup_refresh_tokens(db, settings.refresh_token_revoked_retention_days)
    finally:
        db.close()
        engine.dispose()
