"""CRUD operations for maintenance module."""

from sqlalchemy import and_, func, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..property_management.models import Property, Unit
from .models import MaintenanceRequest, MaintenanceStatus

_LOADS = (
    selectinload(MaintenanceRequest.tenant),
    selectinload(MaintenanceRequest.unit).selectinload(Unit.property),
)


async def get_request_by_id(
    db: AsyncSession, request_id: int
) -> MaintenanceRequest | None:
    """Get a maintenance request with tenant, unit and property loaded."""
    result = await db.execute(
        select(MaintenanceRequest)
        .options(*_LOADS)
        .where(MaintenanceRequest.id == request_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_requests(
    db: AsyncSession,
    tenant_id: int | None = None,
    landlord_id: int | None = None,
    statuses: list[MaintenanceStatus] | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[MaintenanceRequest], int]:
    """Get maintenance requests, newest first.

    Returns:
        Tuple of (list of requests, total count)
    """
    filters = []
    if tenant_id is not None:
        filters.append(MaintenanceRequest.tenant_id == tenant_id)
    if landlord_id is not None:
        filters.append(Property.landlord_id == landlord_id)
    if statuses:
        filters.append(MaintenanceRequest.status.in_(statuses))

    def scoped(query):
        return (
            query.join(Unit, MaintenanceRequest.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .where(and_(true(), *filters))
        )

    total = (
        await db.execute(scoped(select(func.count(MaintenanceRequest.id))))
    ).scalar_one()

    data_query = (
        scoped(select(MaintenanceRequest))
        .options(*_LOADS)
        .order_by(MaintenanceRequest.created_at.desc(), MaintenanceRequest.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def create_request(db: AsyncSession, **kwargs) -> MaintenanceRequest:
    request = MaintenanceRequest(status=MaintenanceStatus.PENDING, **kwargs)
    db.add(request)
    await db.flush()
    return request


async def set_status(
    db: AsyncSession, request: MaintenanceRequest, status: MaintenanceStatus
) -> MaintenanceRequest:
    request.status = status
    await db.flush()
    return request
