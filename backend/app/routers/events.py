"""Event router.

Only the surface needed to put the access, role and ownership checks in
front of real routes.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import CurrentIdentity
from app.dependencies.authorization import (
    ANY_ROLE,
    STAFF,
    OwnershipRule,
    RoutePolicy,
    authorize,
)
from app.models.event import Event
from app.schemas.common import PaginatedResponse
from app.schemas.event import Event as EventSchema
from app.schemas.event import EventCreate, EventPublish, EventUpdate
from app.services.auth.exceptions import ResourceNotFound

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def load_event(db: Session, event_id: str) -> Event | None:
    return db.get(Event, event_id)


PUBLIC = RoutePolicy(public=True)
CREATE_EVENT = RoutePolicy(roles=ANY_ROLE)
MANAGE_EVENT = RoutePolicy(
    roles=ANY_ROLE,
    ownership=OwnershipRule(fetch=load_event, param_name="event_id"),
)
PUBLISH_EVENT = RoutePolicy(roles=STAFF)


def _get_event_or_404(db: Session, event_id: str) -> Event:
    event = load_event(db, event_id)
    if event is None:
        raise ResourceNotFound("Event not found")
    return event


def _can_see_draft(identity: CurrentIdentity | None, event: Event) -> bool:
    if identity is None:
        return False
    return identity.role in STAFF or event.user_id == identity.user_id


@router.get("", response_model=PaginatedResponse[EventSchema])
def list_events(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    identity: CurrentIdentity | None = Depends(authorize(PUBLIC)),
    db: Session = Depends(get_db),
) -> PaginatedResponse[EventSchema]:
    """List published events, plus drafts the caller may see."""
    query = db.query(Event)
    if identity is None:
        query = query.filter(Event.is_published.is_(True))
    elif identity.role not in STAFF:
        query = query.filter(or_(Event.is_published.is_(True), Event.user_id == identity.user_id))

    total = query.count()
    items = query.order_by(Event.created_at.desc()).offset(skip).limit(limit).all()
    return PaginatedResponse[EventSchema].page(
        [EventSchema.model_validate(event) for event in items], total, skip, limit
    )


@router.get("/{event_id}", response_model=EventSchema)
def get_event(
    event_id: str,
    identity: CurrentIdentity | None = Depends(authorize(PUBLIC)),
    db: Session = Depends(get_db),
) -> Event:
    event = _get_event_or_404(db, event_id)
    if not event.is_published and not _can_see_draft(identity, event):
        raise ResourceNotFound("Event not found")
    return event


@router.post("", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
def create_event(
    data: EventCreate,
    identity: CurrentIdentity = Depends(authorize(CREATE_EVENT)),
    db: Session = Depends(get_db),
) -> Event:
    event = Event(**data.model_dump(), user_id=identity.user_id)
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info(f"Event {event.id} created by {identity.user_id}")
    return event


@router.patch("/{event_id}", response_model=EventSchema)
def update_event(
    event_id: str,
    data: EventUpdate,
    identity: CurrentIdentity = Depends(authorize(MANAGE_EVENT)),
    db: Session = Depends(get_db),
) -> Event:
    event = _get_event_or_404(db, event_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(event, field, value)
    db.commit()
    db.refresh(event)
    return event


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_event(
    event_id: str,
    identity: CurrentIdentity = Depends(authorize(MANAGE_EVENT)),
    db: Session = Depends(get_db),
) -> Response:
    event = _get_event_or_404(db, event_id)
    db.delete(event)
    db.commit()
    logger.info(f"Event {event_id} deleted by {identity.user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{event_id}/publish", response_model=EventSchema)
def publish_event(
    event_id: str,
    data: EventPublish,
    identity: CurrentIdentity = Depends(authorize(PUBLISH_EVENT)),
    db: Session = Depends(get_db),
) -> Event:
    """Publish or unpublish an event (staff only)."""
    event = _get_event_or_404(db, event_id)
    event.is_published = data.is_published
    db.commit()
    db.refresh(event)
    return event
