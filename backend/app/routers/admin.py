"""Admin router for administrative operations."""

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.config import Settings
from app.constants import UserRole
from app.database import get_db
from app.dependencies.auth import CurrentIdentity
from app.dependencies.authorization import ADMIN_ONLY, RoutePolicy, authorize
from app.dependencies.services import get_settings
from app.models.event import Event
from app.schemas.admin import AdminStats, RefreshTokenCleanupResponse
from app.services.auth.refresh_token_ledger import RefreshTokenLedger
from app.services.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

ADMIN = RoutePolicy(roles=ADMIN_ONLY)


@router.get("/stats", response_model=AdminStats)
def get_stats(
    admin: CurrentIdentity = Depends(authorize(ADMIN)),
    db: Session = Depends(get_db),
) -> dict:
    """Platform-wide user and event counts."""
    users = UserRepository(db)
    return {
        "total_users": users.count(),
        "admins": users.count(UserRole.ADMIN),
        "moderators": users.count(UserRole.MODERATOR),
        "total_events": db.query(Event).count(),
        "published_events": db.query(Event).filter(Event.is_published.is_(True)).count(),
    }


@router.post("/refresh-tokens/cleanup", response_model=RefreshTokenCleanupResponse)
def cleanup_refresh_tokens(
    admin: CurrentIdentity = Depends(authorize(ADMIN)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Delete expired refresh tokens and ones revoked past the retention window."""
    deleted = RefreshTokenLedger(db).cleanup(
        timedelta(days=settings.refresh_token_revoked_retention_days)
    )
    db.commit()
    logger.info(f"Admin {admin.user_id} removed {deleted} refresh token(s)")
    return {"deleted": deleted}
