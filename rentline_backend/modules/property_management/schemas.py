"""Property management schemas for RentLine."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from .models import UnitStatus

# ----- Property Schemas -----


class PropertyBase(BaseModel):
    """Base property schema."""

    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    city: str | None = Field(None, max_length=120)
    country: str | None = Field(None, max_length=120)
    description: str | None = None


class PropertyCreate(PropertyBase):
    """Schema for creating a property."""

    is_searchable: bool = False


class PropertyUpdate(BaseModel):
    """Schema for updating a property."""

    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, max_length=120)
    country: str | None = Field(None, max_length=120)
    description: str | None = None


class VisibilityUpdate(BaseModel):
    """Publish or hide a property from tenant search."""

    is_searchable: bool


class PropertyResponse(PropertyBase):
    """Schema for property response."""

    id: int
    uuid: UUID
    landlord_id: int
    is_searchable: bool
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class PropertyWithUnitsResponse(PropertyResponse):
    """Property response with units included."""

    units: list["UnitResponse"] = []


# ----- Unit Schemas -----


class UnitBase(BaseModel):
    """Base unit schema."""

    unit_number: str = Field(..., min_length=1, max_length=50)
    bedrooms: int = Field(default=1, ge=0)
    bathrooms: int = Field(default=1, ge=0)
    rent_amount: float = Field(..., gt=0)


class UnitCreate(UnitBase):
    """Schema for creating a unit. New units are vacant unless under maintenance."""

    status: UnitStatus = UnitStatus.VACANT


class UnitUpdate(BaseModel):
    """Schema for updating a unit."""

    unit_number: str | None = Field(None, min_length=1, max_length=50)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    rent_amount: float | None = Field(None, gt=0)
    status: UnitStatus | None = None


class UnitResponse(UnitBase):
    """Schema for unit response."""

    id: int
    uuid: UUID
    property_id: int
    status: UnitStatus
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


# ----- Expense Schemas -----


class ExpenseCreate(BaseModel):
    """Schema for recording an expense."""

    amount: float = Field(..., gt=0)
    description: str = Field(..., min_length=1, max_length=500)
    expense_date: date | None = None


class ExpenseResponse(BaseModel):
    """Schema for expense response."""

    id: int
    uuid: UUID
    property_id: int
    amount: float
    description: str
    expense_date: date
    created_at: datetime

    class Config:
        from_attributes = True


# ----- Search Schemas -----


class PropertySearchResult(BaseModel):
    """A searchable property with its vacant units and their rent range."""

    id: int
    name: str
    address: str
    city: str | None = None
    country: str | None = None
    description: str | None = None
    landlord_id: int
    vacant_units: list[UnitResponse] = []
    vacant_unit_count: int = 0
    min_rent: float | None = None
    max_rent: float | None = None


PropertyWithUnitsResponse.model_rebuild()
