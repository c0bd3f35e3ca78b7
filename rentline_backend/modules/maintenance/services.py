"""Maintenance request business logic services."""

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.access import ensure_owner, is_landlord, is_tenant
from ...core.events import ChangeType, publish_change
from ...core.exceptions import (
    BusinessLogicError,
    PermissionError,
    ResourceNotFoundError,
)
from ...core.logging import get_logger, log_event
from ..auth.schemas import AuthenticatedUser
from ..property_management import crud as property_crud
from ..tenancy_management import crud as tenancy_crud
from . import crud
from .models import MaintenanceRequest, MaintenanceStatus
from .schemas import MaintenanceRequestCreate

logger = get_logger(__name__)

# Completed and cancelled requests are final
STATUS_TRANSITIONS = {
    MaintenanceStatus.PENDING: {
        MaintenanceStatus.IN_PROGRESS,
        MaintenanceStatus.CANCELLED,
    },
    MaintenanceStatus.IN_PROGRESS: {
        MaintenanceStatus.COMPLETED,
        MaintenanceStatus.CANCELLED,
    },
}

OPEN_STATUSES = [MaintenanceStatus.PENDING, MaintenanceStatus.IN_PROGRESS]


async def _load(db: AsyncSession, request_id: int) -> MaintenanceRequest:
    request = await crud.get_request_by_id(db, request_id)
    if not request:
        raise ResourceNotFoundError("Maintenance request", request_id)
    return request


def _audience(request: MaintenanceRequest) -> list[int]:
    return [request.tenant_id, request.unit.property.landlord_id]


async def create_request(
    db: AsyncSession, actor: AuthenticatedUser, data: MaintenanceRequestCreate
) -> MaintenanceRequest:
    """Report a problem on a unit the caller currently rents.

    Raises:
        ResourceNotFoundError: If the unit does not exist
        PermissionError: If the caller has no active tenancy on the unit
    """
    if not await property_crud.get_unit_by_id(db, data.unit_id):
        raise ResourceNotFoundError("Unit", data.unit_id)

    tenancy = await tenancy_crud.get_active_tenancy_for_unit(db, data.unit_id)
    if not tenancy or tenancy.tenant_id != actor.id:
        raise PermissionError("report maintenance on", "unit")

    request = await crud.create_request(
        db,
        tenant_id=actor.id,
        unit_id=data.unit_id,
        title=data.title.strip(),
        description=data.description.strip(),
        category=data.category.strip().lower(),
        urgency=data.urgency,
    )
    await db.commit()

    request = await _load(db, request.id)
    log_event(
        logger,
        "maintenance_requested",
        maintenance_request_id=request.id,
        unit_id=request.unit_id,
        urgency=request.urgency.value,
    )
    publish_change(
        "maintenance_requests", ChangeType.INSERT, request.id, _audience(request)
    )
    return request


async def list_requests(
    db: AsyncSession,
    actor: AuthenticatedUser,
    status: MaintenanceStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[MaintenanceRequest], int]:
    """Tenants see their own requests, landlords those on their properties."""
    scope = {}
    if is_tenant(actor):
        scope["tenant_id"] = actor.id
    elif is_landlord(actor):
        scope["landlord_id"] = actor.id
    return await crud.get_requests(
        db,
        statuses=[status] if status else None,
        skip=skip,
        limit=limit,
        **scope,
    )


async def update_status(
    db: AsyncSession,
    actor: AuthenticatedUser,
    request_id: int,
    status: MaintenanceStatus,
) -> MaintenanceRequest:
    """Advance a request: pending, in progress, then completed or cancelled.

    Raises:
        BusinessLogicError: If the transition is not allowed
    """
    request = await _load(db, request_id)
    ensure_owner(actor, request.unit.property.landlord_id, "update", "maintenance request")

    if status not in STATUS_TRANSITIONS.get(request.status, set()):
        raise BusinessLogicError(
            f"Cannot move maintenance request from {request.status.value} to {status.value}"
        )

    previous = request.status
    await crud.set_status(db, request, status)
    await db.commit()

    log_event(
        logger,
        "maintenance_status_changed",
        maintenance_request_id=request.id,
        from_status=previous.value,
        to_status=status.value,
    )
    publish_change(
        "maintenance_requests", ChangeType.UPDATE, request.id, _audience(request)
    )
    return request


async def cancel_request(
    db: AsyncSession, actor: AuthenticatedUser, request_id: int
) -> MaintenanceRequest:
    """Tenant withdraws a request that nobody has started on."""
    request = await _load(db, request_id)
    if request.tenant_id != actor.id:
        raise PermissionError("cancel", "maintenance request")
    if request.status != MaintenanceStatus.PENDING:
        raise BusinessLogicError("Only pending maintenance requests can be cancelled")

    await crud.set_status(db, request, MaintenanceStatus.CANCELLED)
    await db.commit()

    publish_change(
        "maintenance_requests", ChangeType.UPDATE, request.id, _audience(request)
    )
    return request
