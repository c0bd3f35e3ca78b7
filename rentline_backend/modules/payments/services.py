"""Payment business logic services."""

from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.access import ensure_owner, is_admin, is_landlord, is_tenant
from ...core.events import ChangeType, publish_change
from ...core.exceptions import (
    BusinessLogicError,
    PermissionError,
    ResourceNotFoundError,
    ValidationError,
)
from ...core.logging import get_logger, log_event
from ...core.utils import month_bounds, sanitize_string, to_decimal, today, utc_now
from ..auth import crud as auth_crud
from ..auth.schemas import AuthenticatedUser, ProfileSummary
from ..tenancy_management import crud as tenancy_crud
from ..tenancy_management.models import TenancyStatus
from . import crud
from .models import Payment, PaymentStatus, PayoutRequest, PayoutStatus
from .schemas import (
    BalanceResponse,
    PaymentCreate,
    PaymentResponse,
    PayoutCreate,
    PayoutStatusUpdate,
    RentCollectionReport,
    TenancyCollection,
)

logger = get_logger(__name__)

# Allowed payout status moves; completed and failed are final
PAYOUT_TRANSITIONS = {
    PayoutStatus.PENDING: {
        PayoutStatus.PROCESSING,
        PayoutStatus.COMPLETED,
        PayoutStatus.FAILED,
    },
    PayoutStatus.PROCESSING: {PayoutStatus.COMPLETED, PayoutStatus.FAILED},
}


def _scope(actor: AuthenticatedUser) -> dict[str, int]:
    if is_tenant(actor):
        return {"tenant_id": actor.id}
    if is_landlord(actor):
        return {"landlord_id": actor.id}
    return {}


def _money(value) -> float:
    return float(to_decimal(value).quantize(Decimal("0.01")))


# ----- Payments -----


async def make_payment(
    db: AsyncSession, actor: AuthenticatedUser, data: PaymentCreate
) -> Payment:
    """Record a pending rent payment dated today on the caller's active tenancy.

    No gateway is contacted; the method is stored as a label.

    Raises:
        ResourceNotFoundError: If the tenancy does not exist
        PermissionError: If the tenancy belongs to someone else
        BusinessLogicError: If the tenancy has ended
    """
    tenancy = await tenancy_crud.get_tenancy_by_id(db, data.tenancy_id)
    if not tenancy:
        raise ResourceNotFoundError("Tenancy", data.tenancy_id)
    if tenancy.tenant_id != actor.id:
        raise PermissionError("pay rent on", "tenancy")
    if tenancy.status != TenancyStatus.ACTIVE:
        raise BusinessLogicError("Payments can only be made on an active tenancy")

    payment = await crud.create_payment(
        db,
        tenancy_id=tenancy.id,
        amount=data.amount,
        payment_date=today(),
        status=PaymentStatus.PENDING,
        method=data.method,
        reference=sanitize_string(data.reference, 120),
    )
    await db.commit()

    log_event(
        logger,
        "payment_created",
        payment_id=payment.id,
        tenancy_id=tenancy.id,
        method=data.method.value,
    )
    publish_change(
        "payments",
        ChangeType.INSERT,
        payment.id,
        [tenancy.tenant_id, tenancy.unit.property.landlord_id],
    )
    return payment


async def update_payment_status(
    db: AsyncSession,
    actor: AuthenticatedUser,
    payment_id: int,
    status: PaymentStatus,
) -> Payment:
    """Settle a pending payment as completed or failed.

    Raises:
        ValidationError: If the target status is pending
        BusinessLogicError: If the payment is no longer pending
    """
    if status == PaymentStatus.PENDING:
        raise ValidationError("must be completed or failed", field="status")

    payment = await crud.get_payment_by_id(db, payment_id)
    if not payment:
        raise ResourceNotFoundError("Payment", payment_id)
    landlord_id = payment.tenancy.unit.property.landlord_id
    ensure_owner(actor, landlord_id, "update", "payment")

    if payment.status != PaymentStatus.PENDING:
        raise BusinessLogicError(
            f"Payment is already {payment.status.value}; only pending payments can change"
        )

    await crud.set_payment_status(db, payment, status)
    await db.commit()

    log_event(
        logger, "payment_status_changed", payment_id=payment.id, status=status.value
    )
    publish_change(
        "payments",
        ChangeType.UPDATE,
        payment.id,
        [payment.tenancy.tenant_id, landlord_id],
    )
    return payment


async def list_payments(
    db: AsyncSession,
    actor: AuthenticatedUser,
    tenancy_id: int | None = None,
    status: PaymentStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Payment], int]:
    """Tenants see their own payments, landlords those on their properties."""
    return await crud.get_payments(
        db,
        tenancy_id=tenancy_id,
        status=status,
        skip=skip,
        limit=limit,
        **_scope(actor),
    )


async def rent_collection(
    db: AsyncSession,
    actor: AuthenticatedUser,
    month: str,
    as_of: date | None = None,
) -> RentCollectionReport:
    """Rent position of every active tenancy for a ``YYYY-MM`` month.

    Only completed payments dated within the month count as paid. Rent is
    due on the 1st; a tenancy with money still due is overdue by the whole
    days elapsed since then.
    """
    try:
        first_day, last_day = month_bounds(month)
    except ValueError:
        raise ValidationError("must be in YYYY-MM format", field="month", value=month)

    as_of = as_of or today()
    landlord_id = None if is_admin(actor) else actor.id
    tenancies, _ = await tenancy_crud.get_tenancies(
        db, landlord_id=landlord_id, status=TenancyStatus.ACTIVE, limit=None
    )
    payments = await crud.get_payments_in_range(
        db, [t.id for t in tenancies], first_day, last_day
    )

    rows = []
    total_expected = Decimal("0")
    total_collected = Decimal("0")
    total_outstanding = Decimal("0")
    for tenancy in tenancies:
        tenancy_payments = [p for p in payments if p.tenancy_id == tenancy.id]
        rent = to_decimal(tenancy.rent_amount)
        total_paid = sum(
            (
                to_decimal(p.amount)
                for p in tenancy_payments
                if p.status == PaymentStatus.COMPLETED
            ),
            Decimal("0"),
        )
        amount_due = max(Decimal("0"), rent - total_paid)
        if amount_due > 0 and as_of > first_day:
            days_overdue = (as_of - first_day).days
        else:
            days_overdue = 0

        total_expected += rent
        total_collected += total_paid
        total_outstanding += amount_due
        rows.append(
            TenancyCollection(
                tenancy_id=tenancy.id,
                tenant=ProfileSummary.model_validate(tenancy.tenant),
                unit_number=tenancy.unit.unit_number,
                property_name=tenancy.unit.property.name,
                rent_amount=_money(rent),
                payments=[PaymentResponse.model_validate(p) for p in tenancy_payments],
                total_paid=_money(total_paid),
                amount_due=_money(amount_due),
                days_overdue=days_overdue,
            )
        )

    if total_expected > 0:
        collection_rate = round(float(total_collected / total_expected * 100), 2)
    else:
        collection_rate = 0.0

    return RentCollectionReport(
        month=month,
        tenancies=rows,
        total_expected=_money(total_expected),
        total_collected=_money(total_collected),
        total_outstanding=_money(total_outstanding),
        collection_rate=collection_rate,
    )


# ----- Payouts -----


async def get_balance(db: AsyncSession, landlord_id: int) -> BalanceResponse:
    """Completed payments on the landlord's properties minus non-failed payouts."""
    collected = to_decimal(
        await crud.sum_payments(
            db, landlord_id=landlord_id, status=PaymentStatus.COMPLETED
        )
    )
    paid_out = to_decimal(await crud.payout_crud.sum_committed(db, landlord_id))
    return BalanceResponse(
        total_collected=_money(collected),
        total_paid_out=_money(paid_out),
        available_balance=_money(collected - paid_out),
    )


async def request_payout(
    db: AsyncSession, actor: AuthenticatedUser, data: PayoutCreate
) -> PayoutRequest:
    """Request a withdrawal of collected rent.

    The landlord row is locked and the new payout is written before the
    balance is checked, so a competing request either waits for this one or
    sees its payout in the total.

    Raises:
        BusinessLogicError: If the amount exceeds the available balance
    """
    try:
        await auth_crud.get_profile_for_update(db, actor.id)
        payout = await crud.payout_crud.create(
            db,
            landlord_id=actor.id,
            amount=data.amount,
            phone_number=data.phone_number.strip(),
            status=PayoutStatus.PENDING,
        )
        remaining = to_decimal((await get_balance(db, actor.id)).available_balance)
        if remaining < 0:
            raise BusinessLogicError(
                "Requested amount exceeds available balance",
                details={"available_balance": _money(remaining + to_decimal(data.amount))},
            )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    log_event(logger, "payout_requested", payout_id=payout.id, landlord_id=actor.id)
    publish_change("payout_requests", ChangeType.INSERT, payout.id, [actor.id])
    return payout


async def list_payouts(
    db: AsyncSession,
    actor: AuthenticatedUser,
    status: PayoutStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[PayoutRequest], int]:
    landlord_id = None if is_admin(actor) else actor.id
    return await crud.payout_crud.get_multi(
        db,
        skip=skip,
        limit=limit,
        filters={"landlord_id": landlord_id, "status": status},
    )


async def update_payout_status(
    db: AsyncSession,
    actor: AuthenticatedUser,
    payout_id: int,
    data: PayoutStatusUpdate,
) -> PayoutRequest:
    """Move a payout through processing to completed or failed.

    Raises:
        BusinessLogicError: If the transition is not allowed
    """
    payout = await crud.payout_crud.get(db, payout_id)
    if not payout:
        raise ResourceNotFoundError("Payout request", payout_id)

    allowed = PAYOUT_TRANSITIONS.get(payout.status, set())
    if data.status not in allowed:
        raise BusinessLogicError(
            f"Cannot move payout from {payout.status.value} to {data.status.value}"
        )

    updates = {"status": data.status}
    if data.transaction_id:
        updates["transaction_id"] = data.transaction_id.strip()
    if data.status in (PayoutStatus.COMPLETED, PayoutStatus.FAILED):
        updates["processed_at"] = utc_now()

    await crud.payout_crud.update(db, payout, **updates)
    await db.commit()

    log_event(
        logger,
        "payout_status_changed",
        payout_id=payout.id,
        status=data.status.value,
        processed_by=actor.id,
    )
    publish_change(
        "payout_requests", ChangeType.UPDATE, payout.id, [payout.landlord_id]
    )
    return payout
