"""Schemas for event endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class EventBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    location: str | None = Field(None, max_length=255)


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    location: str | None = Field(None, max_length=255)


class EventPublish(BaseModel):
    is_published: bool


class Event(EventBase):
    """Event as returned by the API."""

    id: str
    is_published: bool
    user_id: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
