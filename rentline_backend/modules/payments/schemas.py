"""Payment schemas for RentLine."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ..auth.schemas import ProfileSummary
from .models import PaymentMethod, PaymentStatus, PayoutStatus

# ----- Payment Schemas -----


class PaymentCreate(BaseModel):
    """Schema for a tenant paying rent."""

    tenancy_id: int
    amount: float = Field(..., gt=0)
    method: PaymentMethod
    reference: str | None = Field(None, max_length=120)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class PaymentResponse(BaseModel):
    """Schema for payment response."""

    id: int
    uuid: UUID
    tenancy_id: int
    amount: float
    payment_date: date
    status: PaymentStatus
    method: PaymentMethod
    reference: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# ----- Rent Collection Schemas -----


class TenancyCollection(BaseModel):
    """One active tenancy's rent position for a month."""

    tenancy_id: int
    tenant: ProfileSummary | None = None
    unit_number: str
    property_name: str
    rent_amount: float
    payments: list[PaymentResponse] = []
    total_paid: float
    amount_due: float
    days_overdue: int


class RentCollectionReport(BaseModel):
    month: str
    tenancies: list[TenancyCollection] = []
    total_expected: float
    total_collected: float
    total_outstanding: float
    collection_rate: float


# ----- Payout Schemas -----


class PayoutCreate(BaseModel):
    amount: float = Field(..., gt=0)
    phone_number: str = Field(..., min_length=6, max_length=32)


class PayoutStatusUpdate(BaseModel):
    status: PayoutStatus
    transaction_id: str | None = Field(None, max_length=120)


class PayoutResponse(BaseModel):
    id: int
    uuid: UUID
    landlord_id: int
    amount: float
    phone_number: str
    status: PayoutStatus
    processed_at: datetime | None = None
    transaction_id: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class BalanceResponse(BaseModel):
    """Collected rent minus payouts that have not failed."""

    total_collected: float
    total_paid_out: float
    available_balance: float
