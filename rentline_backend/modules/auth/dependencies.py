"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ...core.logging import set_actor_id
from .jwt_service import decode_access_token
from .models import RoleSlug
from .schemas import AuthenticatedUser

security = HTTPBearer()


def user_from_token(token: str) -> AuthenticatedUser | None:
    """Build the authenticated user from an access token, or None if invalid."""
    payload = decode_access_token(token)
    if payload is None:
        return None
    try:
        return AuthenticatedUser(
            id=int(payload["sub"]),
            email=payload["email"],
            full_name=payload.get("full_name", ""),
            role_slug=payload["role"],
            is_active=True,  # If token is valid, user was active at token creation
        )
    except (KeyError, ValueError):
        return None


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> AuthenticatedUser:
    """Extract and validate current user from JWT token.

    It does NOT make a database call - all user info is in the token.
    """
    user = user_from_token(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_actor_id(user.id)
    return user


def require_role(*allowed_roles: str | RoleSlug):
    """Dependency factory for role-based access control.

    Usage:
        @router.get("/admin-only")
        async def admin_endpoint(
            current_user: AuthenticatedUser = Depends(require_role(RoleSlug.ADMIN))
        ):
            ...
    """
    role_slugs = {r.value if isinstance(r, RoleSlug) else r for r in allowed_roles}

    async def role_checker(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role_slug not in role_slugs:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required roles: {', '.join(sorted(role_slugs))}",
            )
        return current_user

    return role_checker


# Type aliases for dependency injection
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
TenantUser = Annotated[AuthenticatedUser, Depends(require_role(RoleSlug.TENANT))]
LandlordUser = Annotated[AuthenticatedUser, Depends(require_role(RoleSlug.LANDLORD))]
AdminUser = Annotated[AuthenticatedUser, Depends(require_role(RoleSlug.ADMIN))]
LandlordOrAdminUser = Annotated[
    AuthenticatedUser, Depends(require_role(RoleSlug.LANDLORD, RoleSlug.ADMIN))
]
