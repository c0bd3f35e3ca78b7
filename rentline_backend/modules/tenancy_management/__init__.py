"""Tenancy management module for RentLine.

Routers are imported from ``.routers`` directly; property management
depends on these models, so the package stays import-light.
"""

from .models import JoinRequest, JoinRequestStatus, Tenancy, TenancyStatus

__all__ = [
    # Models
    "Tenancy",
    "JoinRequest",
    # Enums
    "TenancyStatus",
    "JoinRequestStatus",
]
