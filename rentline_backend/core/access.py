"""Ownership checks shared by the module service layers.

Row visibility per role:
- admin sees every row
- landlord sees rows hanging off properties where landlord_id is the caller
- tenant sees rows where tenant_id is the caller
Query-level scoping lives in each module's crud; these helpers guard
single-row operations after the row has been loaded.
"""

from typing import Protocol

from .exceptions import PermissionError

ADMIN_ROLE = "admin"
LANDLORD_ROLE = "landlord"
TENANT_ROLE = "tenant"


class Actor(Protocol):
    id: int
    role_slug: str


def is_admin(actor: Actor) -> bool:
    return actor.role_slug == ADMIN_ROLE


def is_landlord(actor: Actor) -> bool:
    return actor.role_slug == LANDLORD_ROLE


def is_tenant(actor: Actor) -> bool:
    return actor.role_slug == TENANT_ROLE


def ensure_owner(
    actor: Actor, owner_id: int | None, action: str, resource_type: str
) -> None:
    """Raise unless the actor is an admin or owns the row.

    Raises:
        PermissionError: If the actor neither owns the row nor is an admin
    """
    if is_admin(actor):
        return
    if owner_id is None or owner_id != actor.id:
        raise PermissionError(action, resource_type)


def ensure_party(
    actor: Actor,
    tenant_id: int | None,
    landlord_id: int | None,
    action: str,
    resource_type: str,
) -> None:
    """Raise unless the actor is the tenant, the landlord, or an admin."""
    if is_admin(actor):
        return
    if actor.id in (tenant_id, landlord_id):
        return
    raise PermissionError(action, resource_type)
