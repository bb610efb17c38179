"""Schemas for admin endpoints."""

from pydantic import BaseModel, Field


class AdminStats(BaseModel):
    """Platform-wide counters for the admin dashboard."""

    total_users: int
    admins: int
    moderators: int
    total_events: int
    published_events: int


class RefreshTokenCleanupResponse(BaseModel):
    deleted: int = Field(..., description="Number of refresh token rows removed")
