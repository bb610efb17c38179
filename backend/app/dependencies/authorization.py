"""Role and ownership checks, declared per route as a ``RoutePolicy``.

Each protected route states who may call it::

    @router.patch("/{id}")
    def update_event(
        identity: CurrentIdentity = Depends(
            authorize(
                RoutePolicy(
                    roles=frozenset({UserRole.ADMIN, UserRole.USER}),
                    ownership=OwnershipRule(fetch=load_event),
                )
            )
        ),
    ): ...

``authorize`` runs the access check, then the role check, then the
ownership check, and hands the identity to the handler.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.constants import UserRole
from app.database import get_db
from app.dependencies.auth import CurrentIdentity, get_current_identity, get_optional_identity
from app.services.auth.exceptions import Forbidden, ResourceNotFound

logger = logging.getLogger(__name__)

ResourceFetcher = Callable[[Session, str], Any | None]


@dataclass(frozen=True)
class OwnershipRule:
    """How to find a route's resource and who owns it.

    ``owner_field="id"`` marks the resource as a user account, so the
    ownership question becomes "is this the caller themself".
    """

    fetch: ResourceFetcher
    param_name: str = "id"
    owner_field: str = "user_id"
    prevent_moderator_on_admin: bool = False

    @property
    def targets_user(self) -> bool:
        return self.owner_field == "id"


@dataclass(frozen=True)
class RoutePolicy:
    public: bool = False
    roles: frozenset[UserRole] | None = None
    ownership: OwnershipRule | None = None


ANY_ROLE = frozenset(UserRole)
STAFF = frozenset({UserRole.ADMIN, UserRole.MODERATOR})
ADMIN_ONLY = frozenset({UserRole.ADMIN})


def check_role(identity: CurrentIdentity, roles: frozenset[UserRole] | None) -> None:
    """Raise Forbidden unless the caller's role is in ``roles``."""
    if roles is not None and identity.role not in roles:
        raise Forbidden("Insufficient role")


def _may_act_on_user(identity: CurrentIdentity, target: Any, rule: OwnershipRule) -> bool:
    if identity.role == UserRole.USER:
        return target.id == identity.user_id
    if identity.role == UserRole.MODERATOR and rule.prevent_moderator_on_admin:
        return target.role != UserRole.ADMIN
    return False


def check_ownership(
    identity: CurrentIdentity, rule: OwnershipRule, resource_id: str | None, db: Session
) -> None:
    """Raise unless the caller may act on the resource.

    Raises:
        Forbidden: Missing path parameter, ownerless resource, or another owner.
        ResourceNotFound: The resource does not exist.
    """
    if identity.role == UserRole.ADMIN:
        return

    if not resource_id:
        raise Forbidden("Resource identifier missing")

    resource = rule.fetch(db, resource_id)
    if resource is None:
        raise ResourceNotFound()

    if rule.targets_user:
        if not _may_act_on_user(identity, resource, rule):
            raise Forbidden("You can only modify your own account")
        return

    owner_id = getattr(resource, rule.owner_field, None)
    if owner_id is None:
        # Ownerless resources are administered by admins only
        raise Forbidden("Only administrators can modify this resource")
    if owner_id != identity.user_id:
        logger.info(f"User {identity.user_id} denied access to resource {resource_id}")
        raise Forbidden("You can only modify your own resources")


def _enforce(policy: RoutePolicy, identity: CurrentIdentity, request: Request, db: Session) -> None:
    check_role(identity, policy.roles)
    if policy.ownership is not None:
        resource_id = request.path_params.get(policy.ownership.param_name)
        check_ownership(identity, policy.ownership, resource_id, db)


def authorize(policy: RoutePolicy) -> Callable[..., CurrentIdentity | None]:
    """Build the dependency that enforces ``policy``.

    Public policies let anonymous callers through (the dependency returns
    None) but still apply role and ownership checks to identified callers.
    """
    if policy.public:

        def public_dependency(
            request: Request,
            identity: CurrentIdentity | None = Depends(get_optional_identity),
            db: Session = Depends(get_db),
        ) -> CurrentIdentity | None:
            if identity is not None:
                _enforce(policy, identity, request, db)
            return identity

        return public_dependency

    def protected_dependency(
        request: Request,
        identity: CurrentIdentity = Depends(get_current_identity),
        db: Session = Depends(get_db),
    ) -> CurrentIdentity:
        _enforce(policy, identity, request, db)
        return identity

    return protected_dependency
