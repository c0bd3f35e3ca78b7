"""Maintenance request schemas for RentLine."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from ..auth.schemas import ProfileSummary
from ..tenancy_management.schemas import UnitWithProperty
from .models import MaintenanceStatus, MaintenanceUrgency


class MaintenanceRequestCreate(BaseModel):
    unit_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    category: str = Field(..., min_length=1, max_length=60)
    urgency: MaintenanceUrgency = MaintenanceUrgency.MEDIUM


class MaintenanceStatusUpdate(BaseModel):
    status: MaintenanceStatus


class MaintenanceRequestResponse(BaseModel):
    id: int
    uuid: UUID
    tenant_id: int
    unit_id: int
    title: str
    description: str
    category: str
    urgency: MaintenanceUrgency
    status: MaintenanceStatus
    tenant: ProfileSummary | None = None
    unit: UnitWithProperty | None = None
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
