"""Tenancy management schemas for RentLine."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, model_validator

from ..auth.schemas import ProfileSummary
from .models import JoinRequestStatus, TenancyStatus


class PropertyBrief(BaseModel):
    id: int
    name: str
    address: str
    city: str | None = None
    landlord_id: int

    class Config:
        from_attributes = True


class UnitBrief(BaseModel):
    id: int
    unit_number: str
    property_id: int
    rent_amount: float

    class Config:
        from_attributes = True


class UnitWithProperty(UnitBrief):
    property: PropertyBrief | None = None


# ----- Join Request Schemas -----


class JoinRequestCreate(BaseModel):
    """Schema for a tenant's request to join a property."""

    property_id: int
    unit_id: int | None = None  # None means any available unit
    message: str | None = Field(None, max_length=2000)


class JoinRequestResponse(BaseModel):
    """Schema for join request response."""

    id: int
    uuid: UUID
    tenant_id: int
    property_id: int
    unit_id: int | None = None
    status: JoinRequestStatus
    message: str | None = None
    rejection_reason: str | None = None
    tenancy_id: int | None = None
    tenant: ProfileSummary | None = None
    property: PropertyBrief | None = None
    unit: UnitBrief | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ApproveJoinRequest(BaseModel):
    """Terms for the tenancy created by an approval.

    ``unit_id`` is required when the request did not name a unit.
    """

    unit_id: int | None = None
    rent_amount: float | None = Field(None, gt=0)
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RejectJoinRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


# ----- Tenancy Schemas -----


class AddTenantRequest(BaseModel):
    """Schema for a landlord placing a registered tenant directly into a unit."""

    email: EmailStr
    unit_id: int
    rent_amount: float = Field(..., gt=0)
    start_date: date
    end_date: date | None = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class EndTenancyRequest(BaseModel):
    end_date: date | None = None  # defaults to today


class TenancyResponse(BaseModel):
    """Schema for tenancy response."""

    id: int
    uuid: UUID
    tenant_id: int
    unit_id: int
    rent_amount: float
    start_date: date
    end_date: date | None = None
    status: TenancyStatus
    tenant: ProfileSummary | None = None
    unit: UnitWithProperty | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class LeaseSummary(BaseModel):
    """Lease length and time left; None fields mean an open-ended lease."""

    tenancy_id: int
    start_date: date
    end_date: date | None = None
    duration_months: int | None = None
    days_remaining: int | None = None
    is_active: bool
