"""Tenancy management business logic services.

Approval, direct tenant placement and ending a tenancy each touch several
rows (request, tenancy, unit). They run as one unit of work: everything is
flushed into the same session and committed once, or rolled back.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.access import ensure_owner, ensure_party, is_admin, is_landlord, is_tenant
from ...core.events import ChangeType, publish_change
from ...core.exceptions import (
    BusinessLogicError,
    PermissionError,
    ResourceNotFoundError,
    ValidationError,
)
from ...core.logging import get_logger, log_event
from ...core.utils import sanitize_string, today
from ..auth import crud as auth_crud
from ..auth.models import RoleSlug
from ..auth.schemas import AuthenticatedUser
from ..property_management import crud as property_crud
from ..property_management.models import Unit, UnitStatus
from . import crud
from .models import JoinRequest, JoinRequestStatus, Tenancy, TenancyStatus
from .schemas import (
    AddTenantRequest,
    ApproveJoinRequest,
    JoinRequestCreate,
    LeaseSummary,
)

logger = get_logger(__name__)


async def _load_join_request(db: AsyncSession, request_id: int) -> JoinRequest:
    join_request = await crud.get_join_request_by_id(db, request_id)
    if not join_request:
        raise ResourceNotFoundError("Join request", request_id)
    return join_request


async def _load_tenancy(db: AsyncSession, tenancy_id: int) -> Tenancy:
    tenancy = await crud.get_tenancy_by_id(db, tenancy_id)
    if not tenancy:
        raise ResourceNotFoundError("Tenancy", tenancy_id)
    return tenancy


def _ensure_pending(join_request: JoinRequest) -> None:
    if join_request.status != JoinRequestStatus.PENDING:
        raise BusinessLogicError(
            f"Join request is {join_request.status.value}; only pending requests can change"
        )


async def _ensure_assignable(db: AsyncSession, unit: Unit) -> None:
    """A unit can take a new tenancy only while vacant and unleased."""
    if unit.status != UnitStatus.VACANT:
        raise BusinessLogicError(
            f"Unit {unit.unit_number} is {unit.status.value}, not vacant"
        )
    if await crud.get_active_tenancy_for_unit(db, unit.id):
        raise BusinessLogicError(f"Unit {unit.unit_number} already has an active tenancy")


async def _occupy(db: AsyncSession, unit: Unit) -> None:
    if not await property_crud.claim_vacant_unit(db, unit):
        raise BusinessLogicError(
            f"Unit {unit.unit_number} was taken by another tenancy"
        )


def _check_dates(start_date: date, end_date: date | None) -> None:
    if end_date is not None and end_date < start_date:
        raise ValidationError("must not be before start_date", field="end_date")


def _scope(actor: AuthenticatedUser) -> dict[str, int]:
    if is_tenant(actor):
        return {"tenant_id": actor.id}
    if is_landlord(actor):
        return {"landlord_id": actor.id}
    return {}


# ----- Join Requests -----


async def submit_join_request(
    db: AsyncSession, actor: AuthenticatedUser, data: JoinRequestCreate
) -> JoinRequest:
    """Submit a tenant's request to join a published property.

    Raises:
        ResourceNotFoundError: If the property is missing or not published
        ValidationError: If the named unit is not part of the property
        BusinessLogicError: If no unit is available or a pending request exists
    """
    property_obj = await property_crud.get_property_by_id(db, data.property_id)
    if not property_obj or not property_obj.is_searchable:
        raise ResourceNotFoundError("Property", data.property_id)

    if data.unit_id is not None:
        unit = await property_crud.get_unit_by_id(db, data.unit_id)
        if not unit or unit.property_id != property_obj.id:
            raise ValidationError(
                "Unit does not belong to this property",
                field="unit_id",
                value=data.unit_id,
            )
        if unit.status != UnitStatus.VACANT:
            raise BusinessLogicError(f"Unit {unit.unit_number} is not available")

    if not await crud.count_vacant_units(db, property_obj.id):
        raise BusinessLogicError("This property has no vacant units")

    if await crud.find_pending_duplicate(db, actor.id, property_obj.id, data.unit_id):
        raise BusinessLogicError("You already have a pending request for this unit")

    join_request = await crud.create_join_request(
        db,
        tenant_id=actor.id,
        property_id=property_obj.id,
        unit_id=data.unit_id,
        message=sanitize_string(data.message, 2000),
    )
    await db.commit()

    log_event(
        logger,
        "join_request_submitted",
        join_request_id=join_request.id,
        property_id=property_obj.id,
    )
    publish_change(
        "join_requests",
        ChangeType.INSERT,
        join_request.id,
        [actor.id, property_obj.landlord_id],
    )
    return await _load_join_request(db, join_request.id)


async def list_my_join_requests(
    db: AsyncSession, actor: AuthenticatedUser, skip: int = 0, limit: int = 100
) -> tuple[list[JoinRequest], int]:
    return await crud.get_join_requests(db, tenant_id=actor.id, skip=skip, limit=limit)


async def cancel_join_request(
    db: AsyncSession, actor: AuthenticatedUser, request_id: int
) -> JoinRequest:
    """Withdraw a pending request; only its tenant can cancel it."""
    join_request = await _load_join_request(db, request_id)
    if join_request.tenant_id != actor.id and not is_admin(actor):
        raise PermissionError("cancel", "join request")
    _ensure_pending(join_request)

    await crud.update_join_request(
        db, join_request, status=JoinRequestStatus.CANCELLED
    )
    await db.commit()

    publish_change(
        "join_requests",
        ChangeType.UPDATE,
        join_request.id,
        [join_request.tenant_id, join_request.property.landlord_id],
    )
    return join_request


async def list_pending_requests(
    db: AsyncSession, actor: AuthenticatedUser, skip: int = 0, limit: int = 100
) -> tuple[list[JoinRequest], int]:
    """Pending requests on the caller's properties (all for admins), newest first."""
    landlord_id = None if is_admin(actor) else actor.id
    return await crud.get_join_requests(
        db,
        landlord_id=landlord_id,
        status=JoinRequestStatus.PENDING,
        skip=skip,
        limit=limit,
    )


async def approve_join_request(
    db: AsyncSession,
    actor: AuthenticatedUser,
    request_id: int,
    data: ApproveJoinRequest,
) -> JoinRequest:
    """Approve a pending request: create the tenancy and occupy the unit.

    The unit is the one named on the request, or ``data.unit_id`` when the
    request asked for any available unit. Rent defaults to the unit's rent
    and the start date to today.

    Raises:
        ValidationError: If no unit can be resolved or dates are inverted
        BusinessLogicError: If the request is not pending or the unit is taken
    """
    join_request = await _load_join_request(db, request_id)
    ensure_owner(actor, join_request.property.landlord_id, "approve", "join request")
    _ensure_pending(join_request)

    if join_request.unit_id is not None:
        if data.unit_id is not None and data.unit_id != join_request.unit_id:
            raise ValidationError(
                "Request already names a unit", field="unit_id", value=data.unit_id
            )
        unit_id = join_request.unit_id
    elif data.unit_id is not None:
        unit_id = data.unit_id
    else:
        raise ValidationError(
            "A unit must be chosen for a request without one", field="unit_id"
        )

    unit = await property_crud.lock_unit(db, unit_id)
    if not unit or unit.property_id != join_request.property_id:
        raise ValidationError(
            "Unit does not belong to this property", field="unit_id", value=unit_id
        )
    await _ensure_assignable(db, unit)

    start_date = data.start_date or today()
    _check_dates(start_date, data.end_date)
    rent_amount = data.rent_amount if data.rent_amount is not None else unit.rent_amount

    try:
        await _occupy(db, unit)
        tenancy = await crud.create_tenancy(
            db,
            tenant_id=join_request.tenant_id,
            unit_id=unit.id,
            rent_amount=rent_amount,
            start_date=start_date,
            end_date=data.end_date,
        )
        if not await crud.approve_pending_request(
            db, join_request, unit.id, tenancy.id
        ):
            raise BusinessLogicError("Join request was already handled")
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    landlord_id = join_request.property.landlord_id
    audience = [join_request.tenant_id, landlord_id]
    log_event(
        logger,
        "join_request_approved",
        join_request_id=join_request.id,
        tenancy_id=tenancy.id,
        unit_id=unit.id,
    )
    publish_change("join_requests", ChangeType.UPDATE, join_request.id, audience)
    publish_change("tenancies", ChangeType.INSERT, tenancy.id, audience)
    publish_change("units", ChangeType.UPDATE, unit.id, [landlord_id])
    return await _load_join_request(db, join_request.id)


async def reject_join_request(
    db: AsyncSession,
    actor: AuthenticatedUser,
    request_id: int,
    reason: str | None = None,
) -> JoinRequest:
    """Reject a pending request. A blank reason is stored as null."""
    join_request = await _load_join_request(db, request_id)
    ensure_owner(actor, join_request.property.landlord_id, "reject", "join request")
    _ensure_pending(join_request)

    await crud.update_join_request(
        db,
        join_request,
        status=JoinRequestStatus.REJECTED,
        rejection_reason=sanitize_string(reason, 500),
    )
    await db.commit()

    log_event(logger, "join_request_rejected", join_request_id=join_request.id)
    publish_change(
        "join_requests",
        ChangeType.UPDATE,
        join_request.id,
        [join_request.tenant_id, join_request.property.landlord_id],
    )
    return join_request


# ----- Tenancies -----


async def add_tenant(
    db: AsyncSession, actor: AuthenticatedUser, data: AddTenantRequest
) -> Tenancy:
    """Place a registered tenant into one of the landlord's vacant units.

    Raises:
        ResourceNotFoundError: If no profile has the email, or the unit is missing
        ValidationError: If the profile is not a tenant
        BusinessLogicError: If the unit is not vacant
    """
    profile = await auth_crud.get_profile_by_email(db, data.email)
    if not profile:
        raise ResourceNotFoundError("Tenant profile", data.email)
    if profile.role != RoleSlug.TENANT:
        raise ValidationError(
            "Profile is not a tenant account", field="email", value=data.email
        )

    unit = await property_crud.lock_unit(db, data.unit_id)
    if not unit:
        raise ResourceNotFoundError("Unit", data.unit_id)
    ensure_owner(actor, unit.property.landlord_id, "add tenants to", "unit")
    await _ensure_assignable(db, unit)
    _check_dates(data.start_date, data.end_date)

    try:
        await _occupy(db, unit)
        tenancy = await crud.create_tenancy(
            db,
            tenant_id=profile.id,
            unit_id=unit.id,
            rent_amount=data.rent_amount,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    landlord_id = unit.property.landlord_id
    log_event(
        logger,
        "tenant_added",
        tenancy_id=tenancy.id,
        tenant_id=profile.id,
        unit_id=unit.id,
    )
    publish_change("tenancies", ChangeType.INSERT, tenancy.id, [profile.id, landlord_id])
    publish_change("units", ChangeType.UPDATE, unit.id, [landlord_id])
    return await _load_tenancy(db, tenancy.id)


async def list_tenancies(
    db: AsyncSession,
    actor: AuthenticatedUser,
    status: TenancyStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Tenancy], int]:
    """Tenants see their own tenancies, landlords those on their properties."""
    return await crud.get_tenancies(
        db, status=status, skip=skip, limit=limit, **_scope(actor)
    )


async def get_tenancy(
    db: AsyncSession, actor: AuthenticatedUser, tenancy_id: int
) -> Tenancy:
    tenancy = await _load_tenancy(db, tenancy_id)
    ensure_party(
        actor, tenancy.tenant_id, tenancy.unit.property.landlord_id, "view", "tenancy"
    )
    return tenancy


async def end_tenancy(
    db: AsyncSession,
    actor: AuthenticatedUser,
    tenancy_id: int,
    end_date: date | None = None,
) -> Tenancy:
    """End an active tenancy and free its unit.

    Raises:
        BusinessLogicError: If the tenancy already ended
        ValidationError: If the end date is before the start date
    """
    tenancy = await _load_tenancy(db, tenancy_id)
    landlord_id = tenancy.unit.property.landlord_id
    ensure_owner(actor, landlord_id, "end", "tenancy")

    if tenancy.status != TenancyStatus.ACTIVE:
        raise BusinessLogicError("Tenancy has already ended")

    end_date = end_date or today()
    _check_dates(tenancy.start_date, end_date)

    try:
        unit = await property_crud.lock_unit(db, tenancy.unit_id)
        if not await crud.end_tenancy(db, tenancy, end_date):
            raise BusinessLogicError("Tenancy has already ended")
        await property_crud.set_unit_status(db, unit, UnitStatus.VACANT)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    log_event(
        logger,
        "tenancy_ended",
        tenancy_id=tenancy.id,
        unit_id=tenancy.unit_id,
        end_date=end_date.isoformat(),
    )
    publish_change(
        "tenancies", ChangeType.UPDATE, tenancy.id, [tenancy.tenant_id, landlord_id]
    )
    publish_change("units", ChangeType.UPDATE, tenancy.unit_id, [landlord_id])
    return tenancy


def lease_summary(tenancy: Tenancy, as_of: date | None = None) -> LeaseSummary:
    """Lease length in calendar months and days left until the end date.

    Both figures are None for an open-ended lease; days remaining never
    goes below zero.
    """
    as_of = as_of or today()
    duration_months = None
    days_remaining = None
    if tenancy.end_date is not None:
        start, end = tenancy.start_date, tenancy.end_date
        duration_months = (end.year - start.year) * 12 + (end.month - start.month)
        days_remaining = max(0, (end - as_of).days)

    return LeaseSummary(
        tenancy_id=tenancy.id,
        start_date=tenancy.start_date,
        end_date=tenancy.end_date,
        duration_months=duration_months,
        days_remaining=days_remaining,
        is_active=tenancy.status == TenancyStatus.ACTIVE,
    )


async def get_lease_summary(
    db: AsyncSession, actor: AuthenticatedUser, tenancy_id: int
) -> LeaseSummary:
    tenancy = await get_tenancy(db, actor, tenancy_id)
    return lease_summary(tenancy)
