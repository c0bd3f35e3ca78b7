"""Tenancy management API routes."""

from fastapi import APIRouter, Query

from ...database import DB
from ..auth.dependencies import CurrentUser, LandlordOrAdminUser, TenantUser
from ..commons import BaseResponse, PaginatedResponse, Pagination
from . import services
from .models import TenancyStatus
from .schemas import (
    AddTenantRequest,
    ApproveJoinRequest,
    EndTenancyRequest,
    JoinRequestCreate,
    JoinRequestResponse,
    LeaseSummary,
    RejectJoinRequest,
    TenancyResponse,
)

join_requests_router = APIRouter(prefix="/join-requests", tags=["Join Requests"])
router = APIRouter(prefix="/tenancies", tags=["Tenancies"])


def _page(items, total, pagination, schema):
    return PaginatedResponse.from_items(
        items=[schema.model_validate(i) for i in items],
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


# ----- Join Requests -----


@join_requests_router.post(
    "", response_model=BaseResponse[JoinRequestResponse], status_code=201
)
async def submit_join_request(
    data: JoinRequestCreate, current_user: TenantUser, db: DB
):
    """Request to join a property, optionally naming a unit."""
    join_request = await services.submit_join_request(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Join request submitted",
        data=JoinRequestResponse.model_validate(join_request),
    )


@join_requests_router.get(
    "/mine", response_model=BaseResponse[PaginatedResponse[JoinRequestResponse]]
)
async def list_my_join_requests(
    current_user: TenantUser, db: DB, pagination: Pagination
):
    """Get the caller's join requests, newest first."""
    requests, total = await services.list_my_join_requests(
        db, current_user, skip=pagination.offset, limit=pagination.page_size
    )
    return BaseResponse(
        success=True, data=_page(requests, total, pagination, JoinRequestResponse)
    )


@join_requests_router.get(
    "/pending", response_model=BaseResponse[PaginatedResponse[JoinRequestResponse]]
)
async def list_pending_requests(
    current_user: LandlordOrAdminUser, db: DB, pagination: Pagination
):
    """Get pending requests on the caller's properties, newest first."""
    requests, total = await services.list_pending_requests(
        db, current_user, skip=pagination.offset, limit=pagination.page_size
    )
    return BaseResponse(
        success=True, data=_page(requests, total, pagination, JoinRequestResponse)
    )


@join_requests_router.post(
    "/{request_id}/cancel", response_model=BaseResponse[JoinRequestResponse]
)
async def cancel_join_request(request_id: int, current_user: TenantUser, db: DB):
    """Withdraw a pending join request."""
    join_request = await services.cancel_join_request(db, current_user, request_id)
    return BaseResponse(
        success=True,
        message="Join request cancelled",
        data=JoinRequestResponse.model_validate(join_request),
    )


@join_requests_router.post(
    "/{request_id}/approve", response_model=BaseResponse[JoinRequestResponse]
)
async def approve_join_request(
    request_id: int,
    current_user: LandlordOrAdminUser,
    db: DB,
    data: ApproveJoinRequest | None = None,
):
    """Approve a request, creating the tenancy and occupying the unit."""
    join_request = await services.approve_join_request(
        db, current_user, request_id, data or ApproveJoinRequest()
    )
    return BaseResponse(
        success=True,
        message="Join request approved and tenancy created",
        data=JoinRequestResponse.model_validate(join_request),
    )


@join_requests_router.post(
    "/{request_id}/reject", response_model=BaseResponse[JoinRequestResponse]
)
async def reject_join_request(
    request_id: int,
    current_user: LandlordOrAdminUser,
    db: DB,
    data: RejectJoinRequest | None = None,
):
    """Reject a pending join request."""
    join_request = await services.reject_join_request(
        db, current_user, request_id, data.reason if data else None
    )
    return BaseResponse(
        success=True,
        message="Join request rejected",
        data=JoinRequestResponse.model_validate(join_request),
    )


# ----- Tenancies -----


@router.post("", response_model=BaseResponse[TenancyResponse], status_code=201)
async def add_tenant(data: AddTenantRequest, current_user: LandlordOrAdminUser, db: DB):
    """Place a registered tenant into a vacant unit."""
    tenancy = await services.add_tenant(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Tenant added successfully",
        data=TenancyResponse.model_validate(tenancy),
    )


@router.get("", response_model=BaseResponse[PaginatedResponse[TenancyResponse]])
async def list_tenancies(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    status: TenancyStatus | None = Query(None),
):
    """Get tenancies visible to the caller."""
    tenancies, total = await services.list_tenancies(
        db,
        current_user,
        status=status,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True, data=_page(tenancies, total, pagination, TenancyResponse)
    )


@router.get("/{tenancy_id}", response_model=BaseResponse[TenancyResponse])
async def get_tenancy(tenancy_id: int, current_user: CurrentUser, db: DB):
    """Get a tenancy by ID."""
    tenancy = await services.get_tenancy(db, current_user, tenancy_id)
    return BaseResponse(success=True, data=TenancyResponse.model_validate(tenancy))


@router.get("/{tenancy_id}/lease-summary", response_model=BaseResponse[LeaseSummary])
async def get_lease_summary(tenancy_id: int, current_user: CurrentUser, db: DB):
    """Get lease duration and days remaining."""
    summary = await services.get_lease_summary(db, current_user, tenancy_id)
    return BaseResponse(success=True, data=summary)


@router.post("/{tenancy_id}/end", response_model=BaseResponse[TenancyResponse])
async def end_tenancy(
    tenancy_id: int,
    current_user: LandlordOrAdminUser,
    db: DB,
    data: EndTenancyRequest | None = None,
):
    """End a tenancy and free its unit."""
    tenancy = await services.end_tenancy(
        db, current_user, tenancy_id, data.end_date if data else None
    )
    return BaseResponse(
        success=True,
        message="Tenancy ended",
        data=TenancyResponse.model_validate(tenancy),
    )
