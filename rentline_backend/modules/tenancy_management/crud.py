"""CRUD operations for tenancy management module.

List queries are scoped with ``tenant_id`` (a tenant's own rows) or
``landlord_id`` (rows on the landlord's properties); admins pass neither.
"""

from datetime import date

from sqlalchemy import and_, func, select, true, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..property_management.models import Property, Unit, UnitStatus
from .models import JoinRequest, JoinRequestStatus, Tenancy, TenancyStatus

_JOIN_REQUEST_LOADS = (
    selectinload(JoinRequest.tenant),
    selectinload(JoinRequest.property),
    selectinload(JoinRequest.unit),
)

_TENANCY_LOADS = (
    selectinload(Tenancy.tenant),
    selectinload(Tenancy.unit).selectinload(Unit.property),
)

# ----- Join Request CRUD -----


async def get_join_request_by_id(
    db: AsyncSession, request_id: int
) -> JoinRequest | None:
    """Get a join request with tenant, property and unit loaded."""
    result = await db.execute(
        select(JoinRequest)
        .options(*_JOIN_REQUEST_LOADS)
        .where(JoinRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_join_requests(
    db: AsyncSession,
    tenant_id: int | None = None,
    landlord_id: int | None = None,
    status: JoinRequestStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[JoinRequest], int]:
    """Get join requests, newest first.

    Returns:
        Tuple of (list of requests, total count)
    """
    filters = []
    if tenant_id is not None:
        filters.append(JoinRequest.tenant_id == tenant_id)
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if status is not None:
        filters.append(JoinRequest.status == status)

    count_query = (
        select(func.count(JoinRequest.id))
        .join(Property, JoinRequest.property_id == Property.id)
        .where(and_(true(), *filters))
    )
    total = (await db.execute(count_query)).scalar_one()

    data_query = (
        select(JoinRequest)
        .join(Property, JoinRequest.property_id == Property.id)
        .options(*_JOIN_REQUEST_LOADS)
        .where(and_(true(), *filters))
        .order_by(JoinRequest.created_at.desc(), JoinRequest.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def find_pending_duplicate(
    db: AsyncSession, tenant_id: int, property_id: int, unit_id: int | None
) -> JoinRequest | None:
    """A pending request by the same tenant for the same property and unit."""
    unit_filter = (
        JoinRequest.unit_id.is_(None) if unit_id is None else JoinRequest.unit_id == unit_id
    )
    result = await db.execute(
        select(JoinRequest)
        .where(
            and_(
                JoinRequest.tenant_id == tenant_id,
                JoinRequest.property_id == property_id,
                unit_filter,
                JoinRequest.status == JoinRequestStatus.PENDING,
            )
        )
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_join_request(db: AsyncSession, **kwargs) -> JoinRequest:
    """Create a new pending join request."""
    join_request = JoinRequest(status=JoinRequestStatus.PENDING, **kwargs)
    db.add(join_request)
    await db.flush()
    return join_request


async def update_join_request(
    db: AsyncSession, join_request: JoinRequest, **kwargs
) -> JoinRequest:
    """Update a join request."""
    for key, value in kwargs.items():
        if hasattr(join_request, key):
            setattr(join_request, key, value)
    await db.flush()
    return join_request


async def approve_pending_request(
    db: AsyncSession, join_request: JoinRequest, unit_id: int, tenancy_id: int
) -> bool:
    """Move a request from pending to approved.

    Matches no row if the request stopped being pending since it was read,
    in which case nothing is written and False is returned.
    """
    result = await db.execute(
        update(JoinRequest)
        .where(
            and_(
                JoinRequest.id == join_request.id,
                JoinRequest.status == JoinRequestStatus.PENDING,
            )
        )
        .values(
            status=JoinRequestStatus.APPROVED, unit_id=unit_id, tenancy_id=tenancy_id
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    await db.refresh(join_request, ["status", "unit_id", "tenancy_id", "updated_at"])
    return True


async def count_vacant_units(db: AsyncSession, property_id: int) -> int:
    result = await db.execute(
        select(func.count(Unit.id)).where(
            and_(Unit.property_id == property_id, Unit.status == UnitStatus.VACANT)
        )
    )
    return result.scalar_one()


# ----- Tenancy CRUD -----


async def get_tenancy_by_id(db: AsyncSession, tenancy_id: int) -> Tenancy | None:
    """Get a tenancy with tenant, unit and property loaded."""
    result = await db.execute(
        select(Tenancy)
        .options(*_TENANCY_LOADS)
        .where(Tenancy.id == tenancy_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_tenancies(
    db: AsyncSession,
    tenant_id: int | None = None,
    landlord_id: int | None = None,
    status: TenancyStatus | None = None,
    skip: int = 0,
    limit: int | None = 100,
) -> tuple[list[Tenancy], int]:
    """Get tenancies, newest first.

    Returns:
        Tuple of (list of tenancies, total count)
    """
    filters = []
    if tenant_id is not None:
        filters.append(Tenancy.tenant_id == tenant_id)
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if status is not None:
        filters.append(Tenancy.status == status)

    def scoped(query):
        return (
            query.join(Unit, Tenancy.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .where(and_(true(), *filters))
        )

    total = (await db.execute(scoped(select(func.count(Tenancy.id))))).scalar_one()

    data_query = (
        scoped(select(Tenancy))
        .options(*_TENANCY_LOADS)
        .order_by(Tenancy.created_at.desc(), Tenancy.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def get_active_tenancy_for_unit(db: AsyncSession, unit_id: int) -> Tenancy | None:
    result = await db.execute(
        select(Tenancy)
        .where(and_(Tenancy.unit_id == unit_id, Tenancy.status == TenancyStatus.ACTIVE))
        .limit(1)
    )
    return result.scalar_one_or_none()


async def create_tenancy(
    db: AsyncSession,
    tenant_id: int,
    unit_id: int,
    rent_amount,
    start_date: date,
    end_date: date | None = None,
) -> Tenancy:
    """Create a new active tenancy."""
    tenancy = Tenancy(
        tenant_id=tenant_id,
        unit_id=unit_id,
        rent_amount=rent_amount,
        start_date=start_date,
        end_date=end_date,
        status=TenancyStatus.ACTIVE,
    )
    db.add(tenancy)
    await db.flush()
    return tenancy


async def end_tenancy(db: AsyncSession, tenancy: Tenancy, end_date: date) -> bool:
    """Mark an active tenancy ended. False if it was no longer active."""
    result = await db.execute(
        update(Tenancy)
        .where(and_(Tenancy.id == tenancy.id, Tenancy.status == TenancyStatus.ACTIVE))
        .values(status=TenancyStatus.ENDED, end_date=end_date)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        return False
    await db.refresh(tenancy, ["status", "end_date", "updated_at"])
    return True
