"""Payment API routes."""

from fastapi import APIRouter, Query

from ...core.utils import today
from ...database import DB
from ..auth.dependencies import (
    AdminUser,
    CurrentUser,
    LandlordOrAdminUser,
    LandlordUser,
    TenantUser,
)
from ..commons import BaseResponse, PaginatedResponse, Pagination
from . import services
from .models import PaymentStatus, PayoutStatus
from .schemas import (
    BalanceResponse,
    PaymentCreate,
    PaymentResponse,
    PaymentStatusUpdate,
    PayoutCreate,
    PayoutResponse,
    PayoutStatusUpdate,
    RentCollectionReport,
)

router = APIRouter(prefix="/payments", tags=["Payments"])
payouts_router = APIRouter(prefix="/payouts", tags=["Payouts"])


# ----- Payments -----


@router.post("", response_model=BaseResponse[PaymentResponse], status_code=201)
async def make_payment(data: PaymentCreate, current_user: TenantUser, db: DB):
    """Pay rent on one of the caller's tenancies."""
    payment = await services.make_payment(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Payment submitted",
        data=PaymentResponse.model_validate(payment),
    )


@router.get("", response_model=BaseResponse[PaginatedResponse[PaymentResponse]])
async def list_payments(
    current_user: CurrentUser,
    db: DB,
    pagination: Pagination,
    tenancy_id: int | None = Query(None),
    status: PaymentStatus | None = Query(None),
):
    """Get payments visible to the caller, newest first."""
    payments, total = await services.list_payments(
        db,
        current_user,
        tenancy_id=tenancy_id,
        status=status,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PaymentResponse.model_validate(p) for p in payments],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@router.get("/rent-collection", response_model=BaseResponse[RentCollectionReport])
async def rent_collection(
    current_user: LandlordOrAdminUser,
    db: DB,
    month: str | None = Query(None, description="YYYY-MM, defaults to this month"),
):
    """Rent collected and outstanding per active tenancy for a month."""
    report = await services.rent_collection(
        db, current_user, month or today().strftime("%Y-%m")
    )
    return BaseResponse(success=True, data=report)


@router.put("/{payment_id}/status", response_model=BaseResponse[PaymentResponse])
async def update_payment_status(
    payment_id: int,
    data: PaymentStatusUpdate,
    current_user: LandlordOrAdminUser,
    db: DB,
):
    """Mark a pending payment completed or failed."""
    payment = await services.update_payment_status(
        db, current_user, payment_id, data.status
    )
    return BaseResponse(
        success=True,
        message=f"Payment marked {data.status.value}",
        data=PaymentResponse.model_validate(payment),
    )


# ----- Payouts -----


@payouts_router.get("/balance", response_model=BaseResponse[BalanceResponse])
async def get_balance(current_user: LandlordUser, db: DB):
    """Available balance for withdrawal."""
    balance = await services.get_balance(db, current_user.id)
    return BaseResponse(success=True, data=balance)


@payouts_router.post("", response_model=BaseResponse[PayoutResponse], status_code=201)
async def request_payout(data: PayoutCreate, current_user: LandlordUser, db: DB):
    """Request a payout of collected rent."""
    payout = await services.request_payout(db, current_user, data)
    return BaseResponse(
        success=True,
        message="Payout request submitted",
        data=PayoutResponse.model_validate(payout),
    )


@payouts_router.get("", response_model=BaseResponse[PaginatedResponse[PayoutResponse]])
async def list_payouts(
    current_user: LandlordOrAdminUser,
    db: DB,
    pagination: Pagination,
    status: PayoutStatus | None = Query(None),
):
    """Get payout requests, newest first."""
    payouts, total = await services.list_payouts(
        db,
        current_user,
        status=status,
        skip=pagination.offset,
        limit=pagination.page_size,
    )
    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PayoutResponse.model_validate(p) for p in payouts],
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
        ),
    )


@payouts_router.put("/{payout_id}/status", response_model=BaseResponse[PayoutResponse])
async def update_payout_status(
    payout_id: int, data: PayoutStatusUpdate, current_user: AdminUser, db: DB
):
    """Advance a payout request (admin only)."""
    payout = await services.update_payout_status(db, current_user, payout_id, data)
    return BaseResponse(
        success=True,
        message=f"Payout marked {data.status.value}",
        data=PayoutResponse.model_validate(payout),
    )
