"""CRUD operations for payments module."""

from datetime import date

from sqlalchemy import and_, func, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ...core.base_crud import BaseCRUD
from ..property_management.models import Property, Unit
from ..tenancy_management.models import Tenancy
from .models import Payment, PaymentStatus, PayoutRequest, PayoutStatus

# ----- Payment CRUD -----


def _scoped(query, tenant_id: int | None, landlord_id: int | None):
    """Join payments through tenancy and unit to the owning property."""
    query = (
        query.join(Tenancy, Payment.tenancy_id == Tenancy.id)
        .join(Unit, Tenancy.unit_id == Unit.id)
        .join(Property, Unit.property_id == Property.id)
    )
    if tenant_id is not None:
        query = query.where(Tenancy.tenant_id == tenant_id)
    if landlord_id is not None:
        query = query.where(Property.landlord_id == landlord_id)
    return query


async def get_payment_by_id(db: AsyncSession, payment_id: int) -> Payment | None:
    """Get a payment with its tenancy, unit and property loaded."""
    result = await db.execute(
        select(Payment)
        .options(
            selectinload(Payment.tenancy)
            .selectinload(Tenancy.unit)
            .selectinload(Unit.property)
        )
        .where(Payment.id == payment_id)
    )
    return result.scalar_one_or_none()


async def get_payments(
    db: AsyncSession,
    tenant_id: int | None = None,
    landlord_id: int | None = None,
    tenancy_id: int | None = None,
    status: PaymentStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> tuple[list[Payment], int]:
    """Get payments, newest first.

    Returns:
        Tuple of (list of payments, total count)
    """
    filters = []
    if tenancy_id is not None:
        filters.append(Payment.tenancy_id == tenancy_id)
    if status is not None:
        filters.append(Payment.status == status)

    count_query = _scoped(select(func.count(Payment.id)), tenant_id, landlord_id)
    total = (await db.execute(count_query.where(and_(true(), *filters)))).scalar_one()

    data_query = (
        _scoped(select(Payment), tenant_id, landlord_id)
        .where(and_(true(), *filters))
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(data_query)
    return list(result.scalars().all()), total


async def get_payments_in_range(
    db: AsyncSession, tenancy_ids: list[int], start: date, end: date
) -> list[Payment]:
    """Payments of any status dated within [start, end] for the given tenancies."""
    if not tenancy_ids:
        return []
    result = await db.execute(
        select(Payment)
        .where(
            and_(
                Payment.tenancy_id.in_(tenancy_ids),
                Payment.payment_date >= start,
                Payment.payment_date <= end,
            )
        )
        .order_by(Payment.payment_date, Payment.id)
    )
    return list(result.scalars().all())


async def sum_payments(
    db: AsyncSession,
    tenant_id: int | None = None,
    landlord_id: int | None = None,
    status: PaymentStatus | None = None,
    start: date | None = None,
    end: date | None = None,
):
    """Sum of payment amounts in scope; zero when there are none."""
    query = _scoped(
        select(func.coalesce(func.sum(Payment.amount), 0)), tenant_id, landlord_id
    )
    if status is not None:
        query = query.where(Payment.status == status)
    if start is not None:
        query = query.where(Payment.payment_date >= start)
    if end is not None:
        query = query.where(Payment.payment_date <= end)
    return (await db.execute(query)).scalar_one()


async def create_payment(db: AsyncSession, **kwargs) -> Payment:
    payment = Payment(**kwargs)
    db.add(payment)
    await db.flush()
    return payment


async def set_payment_status(
    db: AsyncSession, payment: Payment, status: PaymentStatus
) -> Payment:
    payment.status = status
    await db.flush()
    return payment


# ----- Payout CRUD -----


class PayoutCRUD(BaseCRUD[PayoutRequest]):
    """Payout requests, newest first."""

    async def sum_committed(self, db: AsyncSession, landlord_id: int):
        """Total of a landlord's payouts that have not failed."""
        result = await db.execute(
            select(func.coalesce(func.sum(PayoutRequest.amount), 0)).where(
                and_(
                    PayoutRequest.landlord_id == landlord_id,
                    PayoutRequest.status != PayoutStatus.FAILED,
                )
            )
        )
        return result.scalar_one()


payout_crud = PayoutCRUD(PayoutRequest)
