"""Dashboard schemas for RentLine."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from ..tenancy_management.schemas import TenancyResponse


class AdminStats(BaseModel):
    total_properties: int
    total_units: int
    occupied_units: int
    occupancy_rate: int  # whole percent
    total_tenants: int
    total_landlords: int
    total_payments: float  # all payments regardless of status
    completed_payments: float
    pending_maintenance: int
    active_tenancies: int


class PropertyOverview(BaseModel):
    property_id: int
    name: str
    is_searchable: bool
    unit_count: int
    occupied_count: int
    potential_monthly_rent: float


class LandlordOverview(BaseModel):
    properties: list[PropertyOverview] = []
    total_properties: int
    total_units: int
    occupied_units: int
    occupancy_rate: int
    potential_monthly_rent: float
    pending_join_requests: int
    open_maintenance_requests: int


class TenantOverview(BaseModel):
    active_tenancies: list[TenancyResponse] = []
    total_monthly_rent: float
    paid_this_month: float
    open_maintenance_requests: int


class ActivityItem(BaseModel):
    kind: Literal["payment", "maintenance", "join_request"]
    id: int
    title: str
    status: str
    amount: float | None = None
    created_at: datetime
