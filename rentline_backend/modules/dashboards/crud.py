"""Aggregate queries for dashboards."""

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..maintenance.models import MaintenanceRequest, MaintenanceStatus
from ..property_management.models import Property, Unit, UnitStatus
from ..tenancy_management.models import Tenancy, TenancyStatus


async def count_properties(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(Property.id)))).scalar_one()


async def count_units(db: AsyncSession, status: UnitStatus | None = None) -> int:
    query = select(func.count(Unit.id))
    if status is not None:
        query = query.where(Unit.status == status)
    return (await db.execute(query)).scalar_one()


async def count_tenancies(db: AsyncSession, status: TenancyStatus) -> int:
    result = await db.execute(
        select(func.count(Tenancy.id)).where(Tenancy.status == status)
    )
    return result.scalar_one()


async def count_maintenance(
    db: AsyncSession,
    statuses: list[MaintenanceStatus],
    tenant_id: int | None = None,
    landlord_id: int | None = None,
) -> int:
    query = select(func.count(MaintenanceRequest.id)).where(
        MaintenanceRequest.status.in_(statuses)
    )
    if tenant_id is not None:
        query = query.where(MaintenanceRequest.tenant_id == tenant_id)
    if landlord_id is not None:
        query = (
            query.join(Unit, MaintenanceRequest.unit_id == Unit.id)
            .join(Property, Unit.property_id == Property.id)
            .where(Property.landlord_id == landlord_id)
        )
    return (await db.execute(query)).scalar_one()


async def get_landlord_properties(db: AsyncSession, landlord_id: int) -> list[Property]:
    """A landlord's properties with units, newest first."""
    result = await db.execute(
        select(Property)
        .options(selectinload(Property.units))
        .where(Property.landlord_id == landlord_id)
        .order_by(Property.created_at.desc(), Property.id.desc())
    )
    return list(result.scalars().all())


async def get_active_tenancies(db: AsyncSession, tenant_id: int) -> list[Tenancy]:
    """A tenant's active tenancies with unit and property loaded."""
    result = await db.execute(
        select(Tenancy)
        .options(
            selectinload(Tenancy.tenant),
            selectinload(Tenancy.unit).selectinload(Unit.property),
        )
        .where(
            and_(Tenancy.tenant_id == tenant_id, Tenancy.status == TenancyStatus.ACTIVE)
        )
        .order_by(Tenancy.created_at.desc(), Tenancy.id.desc())
    )
    return list(result.scalars().all())
