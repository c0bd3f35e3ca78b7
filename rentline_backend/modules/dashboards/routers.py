"""Dashboard API routes."""

from fastapi import APIRouter, Query

from ...database import DB
from ..auth.dependencies import AdminUser, CurrentUser, LandlordUser, TenantUser
from ..commons import BaseResponse
from . import services
from .schemas import ActivityItem, AdminStats, LandlordOverview, TenantOverview

router = APIRouter(prefix="/dashboards", tags=["Dashboards"])


@router.get("/admin", response_model=BaseResponse[AdminStats])
async def admin_dashboard(current_user: AdminUser, db: DB):
    """Platform-wide statistics."""
    return BaseResponse(success=True, data=await services.admin_stats(db))


@router.get("/landlord", response_model=BaseResponse[LandlordOverview])
async def landlord_dashboard(current_user: LandlordUser, db: DB):
    """Occupancy and rent potential of the caller's properties."""
    overview = await services.landlord_overview(db, current_user.id)
    return BaseResponse(success=True, data=overview)


@router.get("/tenant", response_model=BaseResponse[TenantOverview])
async def tenant_dashboard(current_user: TenantUser, db: DB):
    """The caller's leases and this month's payments."""
    overview = await services.tenant_overview(db, current_user.id)
    return BaseResponse(success=True, data=overview)


@router.get("/activity", response_model=BaseResponse[list[ActivityItem]])
async def activity_feed(
    current_user: CurrentUser, db: DB, limit: int = Query(10, ge=1, le=50)
):
    """Recent activity visible to the caller."""
    items = await services.activity_feed(db, current_user, limit)
    return BaseResponse(success=True, data=items)
