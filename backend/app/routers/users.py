"""User profile router."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies.auth import CurrentIdentity, get_current_user
from app.dependencies.authorization import (
    ANY_ROLE,
    STAFF,
    OwnershipRule,
    RoutePolicy,
    authorize,
)
from app.dependencies.services import get_user_service
from app.models.user import User
from app.schemas.user import UserResponse, UserUpdate
from app.services.auth.exceptions import ResourceNotFound
from app.services.repositories.user_repository import UserRepository
from app.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def load_user(db: Session, user_id: str) -> User | None:
    return UserRepository(db).find_by_id(user_id)


VIEW_USER = RoutePolicy(roles=STAFF)
MANAGE_USER = RoutePolicy(
    roles=ANY_ROLE,
    ownership=OwnershipRule(
        fetch=load_user,
        param_name="user_id",
        owner_field="id",
        prevent_moderator_on_admin=True,
    ),
)


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = load_user(db, user_id)
    if user is None:
        raise ResourceNotFound("User not found")
    return user


@router.get("/me", response_model=UserResponse)
def get_me(current_user: User = Depends(get_current_user)) -> User:
    """Get the authenticated user's profile."""
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_me(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
) -> User:
    """Update the authenticated user's profile.

    Changing email or password signs the user out everywhere.
    """
    return users.update_profile(current_user, data, actor_role=current_user.role)


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: str,
    identity: CurrentIdentity = Depends(authorize(VIEW_USER)),
    db: Session = Depends(get_db),
) -> User:
    return _get_user_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: str,
    data: UserUpdate,
    identity: CurrentIdentity = Depends(authorize(MANAGE_USER)),
    db: Session = Depends(get_db),
    users: UserService = Depends(get_user_service),
) -> User:
    """Update a user. Users edit themselves; moderators edit non-admins."""
    target = _get_user_or_404(db, user_id)
    return users.update_profile(target, data, actor_role=identity.role)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    identity: CurrentIdentity = Depends(authorize(MANAGE_USER)),
    db: Session = Depends(get_db),
    users: UserService = Depends(get_user_service),
) -> Response:
    target = _get_user_or_404(db, user_id)
    users.delete_user(target)
    logger.info(f"User {user_id} deleted by {identity.user_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
