"""Property management module for RentLine."""

from .models import Expense, Property, Unit, UnitStatus
from .routers import expenses_router, router, units_router

__all__ = [
    # Models
    "Property",
    "Unit",
    "Expense",
    # Enums
    "UnitStatus",
    # Routers
    "router",
    "units_router",
    "expenses_router",
]
