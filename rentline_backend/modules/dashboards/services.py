"""Dashboard aggregation services.

Each dashboard is a set of counts and sums over the rows the caller can
see; nothing here writes.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.access import is_landlord, is_tenant
from ...core.utils import as_utc, month_bounds, percent, to_decimal, today
from ..auth import crud as auth_crud
from ..auth.models import RoleSlug
from ..auth.schemas import AuthenticatedUser
from ..maintenance import crud as maintenance_crud
from ..maintenance.models import MaintenanceStatus
from ..payments import crud as payment_crud
from ..payments.models import PaymentStatus
from ..property_management.models import UnitStatus
from ..tenancy_management import crud as tenancy_crud
from ..tenancy_management.models import JoinRequestStatus, TenancyStatus
from ..tenancy_management.schemas import TenancyResponse
from . import crud
from .schemas import (
    ActivityItem,
    AdminStats,
    LandlordOverview,
    PropertyOverview,
    TenantOverview,
)

OPEN_MAINTENANCE = [MaintenanceStatus.PENDING, MaintenanceStatus.IN_PROGRESS]


async def admin_stats(db: AsyncSession) -> AdminStats:
    total_units = await crud.count_units(db)
    occupied_units = await crud.count_units(db, UnitStatus.OCCUPIED)
    role_counts = await auth_crud.count_profiles_by_role(db)

    return AdminStats(
        total_properties=await crud.count_properties(db),
        total_units=total_units,
        occupied_units=occupied_units,
        occupancy_rate=percent(occupied_units, total_units),
        total_tenants=role_counts[RoleSlug.TENANT.value],
        total_landlords=role_counts[RoleSlug.LANDLORD.value],
        total_payments=float(to_decimal(await payment_crud.sum_payments(db))),
        completed_payments=float(
            to_decimal(
                await payment_crud.sum_payments(db, status=PaymentStatus.COMPLETED)
            )
        ),
        pending_maintenance=await crud.count_maintenance(
            db, [MaintenanceStatus.PENDING]
        ),
        active_tenancies=await crud.count_tenancies(db, TenancyStatus.ACTIVE),
    )


async def landlord_overview(db: AsyncSession, landlord_id: int) -> LandlordOverview:
    properties = await crud.get_landlord_properties(db, landlord_id)

    rows = []
    total_units = 0
    occupied_units = 0
    total_rent = Decimal("0")
    for property_obj in properties:
        units = property_obj.units
        occupied = sum(1 for u in units if u.status == UnitStatus.OCCUPIED)
        rent = sum((to_decimal(u.rent_amount) for u in units), Decimal("0"))
        total_units += len(units)
        occupied_units += occupied
        total_rent += rent
        rows.append(
            PropertyOverview(
                property_id=property_obj.id,
                name=property_obj.name,
                is_searchable=property_obj.is_searchable,
                unit_count=len(units),
                occupied_count=occupied,
                potential_monthly_rent=float(rent),
            )
        )

    _, pending_requests = await tenancy_crud.get_join_requests(
        db, landlord_id=landlord_id, status=JoinRequestStatus.PENDING, limit=0
    )

    return LandlordOverview(
        properties=rows,
        total_properties=len(properties),
        total_units=total_units,
        occupied_units=occupied_units,
        occupancy_rate=percent(occupied_units, total_units),
        potential_monthly_rent=float(total_rent),
        pending_join_requests=pending_requests,
        open_maintenance_requests=await crud.count_maintenance(
            db, OPEN_MAINTENANCE, landlord_id=landlord_id
        ),
    )


async def tenant_overview(db: AsyncSession, tenant_id: int) -> TenantOverview:
    tenancies = await crud.get_active_tenancies(db, tenant_id)
    first_day, last_day = month_bounds(today().strftime("%Y-%m"))
    paid = await payment_crud.sum_payments(
        db,
        tenant_id=tenant_id,
        status=PaymentStatus.COMPLETED,
        start=first_day,
        end=last_day,
    )

    return TenantOverview(
        active_tenancies=[TenancyResponse.model_validate(t) for t in tenancies],
        total_monthly_rent=float(
            sum((to_decimal(t.rent_amount) for t in tenancies), Decimal("0"))
        ),
        paid_this_month=float(to_decimal(paid)),
        open_maintenance_requests=await crud.count_maintenance(
            db, OPEN_MAINTENANCE, tenant_id=tenant_id
        ),
    )


async def activity_feed(
    db: AsyncSession, actor: AuthenticatedUser, limit: int = 10
) -> list[ActivityItem]:
    """Recent payments, maintenance and join requests the caller can see, newest first."""
    scope = {}
    if is_tenant(actor):
        scope["tenant_id"] = actor.id
    elif is_landlord(actor):
        scope["landlord_id"] = actor.id

    payments, _ = await payment_crud.get_payments(db, limit=limit, **scope)
    requests, _ = await maintenance_crud.get_requests(db, limit=limit, **scope)
    join_requests, _ = await tenancy_crud.get_join_requests(db, limit=limit, **scope)

    items = [
        ActivityItem(
            kind="payment",
            id=p.id,
            title=f"Payment via {p.method.value}",
            status=p.status.value,
            amount=float(p.amount),
            created_at=as_utc(p.created_at),
        )
        for p in payments
    ]
    items += [
        ActivityItem(
            kind="maintenance",
            id=r.id,
            title=r.title,
            status=r.status.value,
            created_at=as_utc(r.created_at),
        )
        for r in requests
    ]
    items += [
        ActivityItem(
            kind="join_request",
            id=j.id,
            title=f"Request to join {j.property.name}",
            status=j.status.value,
            created_at=as_utc(j.created_at),
        )
        for j in join_requests
    ]

    items.sort(key=lambda item: (item.created_at, item.id), reverse=True)
    return items[:limit]
