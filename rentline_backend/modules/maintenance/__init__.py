"""Maintenance module for RentLine."""

from .models import MaintenanceRequest, MaintenanceStatus, MaintenanceUrgency

__all__ = [
    "MaintenanceRequest",
    "MaintenanceStatus",
    "MaintenanceUrgency",
]
