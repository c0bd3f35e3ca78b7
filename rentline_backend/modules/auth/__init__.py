"""Authentication module for RentLine."""

from .dependencies import (
    AdminUser,
    CurrentUser,
    LandlordOrAdminUser,
    LandlordUser,
    TenantUser,
    get_current_user,
    require_role,
)
from .models import Profile, RefreshToken, RoleSlug
from .routers import router
from .schemas import AuthenticatedUser

__all__ = [
    # Models
    "Profile",
    "RoleSlug",
    "RefreshToken",
    # Router
    "router",
    # Dependencies
    "get_current_user",
    "require_role",
    "CurrentUser",
    "TenantUser",
    "LandlordUser",
    "AdminUser",
    "LandlordOrAdminUser",
    # Schemas
    "AuthenticatedUser",
]
