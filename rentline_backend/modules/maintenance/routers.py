"""Maintenance request API routes."""

from fastapi import APIRouter, Query

from ...database import DB
from ..auth.dependencies import CurrentUser, LandlordOrAdminUser, TenantUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from . import services
from .models import MaintenanceStatus
from .schemas import (
    MaintenanceRequestCreate,
    MaintenanceRequestResponse,
    MaintenanceStatusUpdate,
)

router = APIRouter(prefix="/maintenance-requests", tags=["Maintenance"])


@router.post("", response_model=BaseResponse[MaintenanceRequestResponse], status_code=201)
async def create_request(
    data: MaintenanceRequestCreate, current_user: TenantUser, db: DB
):
    """Report a maintenance problem on the caller's unit."""
    request = await services.create_request(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Maintenance request submitted",
        data=MaintenanceRequestResponse.model_validate(request),
    )


@router.get(
    "", response_model=BaseResponse[PaginatedResponse[MaintenanceRequestResponse]]
)
async def list_requests(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    status: MaintenanceStatus | None = Query(None),
):
    """Get maintenance requests visible to the caller, newest first."""
    requests, total = await services.list_requests(
        db,
        current_user,
        status=status,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[MaintenanceRequestResponse.model_validate(r) for r in requests],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.put(
    "/{request_id}/status", response_model=BaseResponse[MaintenanceRequestResponse]
)
async def update_status(
    request_id: int,
    data: MaintenanceStatusUpdate,
    current_user: LandlordOrAdminUser,
    db: DB,
):
    """Move a maintenance request to its next status."""
    request = await services.update_status(db, current_user, request_id, data.status)
    return BaseResponse(
        success=True,
        message=f"Maintenance request is now {data.status.value}",
        data=MaintenanceRequestResponse.model_validate(request),
    )


@router.post(
    "/{request_id}/cancel", response_model=BaseResponse[MaintenanceRequestResponse]
)
async def cancel_request(request_id: int, current_user: TenantUser, db: DB):
    """Withdraw a pending maintenance request."""
    request = await services.cancel_request(db, current_user, request_id)
    return BaseResponse(
        success=True,
        message="Maintenance request cancelled",
        data=MaintenanceRequestResponse.model_validate(request),
    )
