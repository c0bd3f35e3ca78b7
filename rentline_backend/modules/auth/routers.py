"""Authentication API routes."""

from fastapi import APIRouter, Request

from ...database import DB
from ..commons import BaseResponse
from . import services
from .dependencies import CurrentUser
from .schemas import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    RefreshTokenRequest,
    RegisterRequest,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_client_info(request: Request) -> tuple[str | None, str | None]:
    """Extract client info from request."""
    user_agent = request.headers.get("user-agent")
    # Get IP from X-Forwarded-For header or fall back to client host
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return user_agent, ip_address


@router.post("/register", response_model=BaseResponse[ProfileResponse], status_code=201)
async def register(data: RegisterRequest, db: DB):
    """Create a tenant or landlord account."""
    profile = await services.register_profile(db, data)
    return BaseResponse(
        success=True,
        message="Account created successfully",
        data=ProfileResponse.model_validate(profile),
    )


@router.post("/login", response_model=BaseResponse[TokenResponse])
async def login(request: Request, login_data: LoginRequest, db: DB):
    """Authenticate user and return access/refresh tokens."""
    user_agent, ip_address = get_client_info(request)

    profile, tokens = await services.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password,
        remember_me=login_data.remember_me,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(
        success=True,
        message=f"Welcome back, {profile.full_name}!",
        data=tokens,
    )


@router.post("/refresh", response_model=BaseResponse[TokenResponse])
async def refresh_token(request: Request, refresh_data: RefreshTokenRequest, db: DB):
    """Refresh access token using refresh token."""
    user_agent, ip_address = get_client_info(request)

    tokens = await services.refresh_access_token(
        db=db,
        refresh_token=refresh_data.refresh_token,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    return BaseResponse(
        success=True,
        message="Token refreshed successfully",
        data=tokens,
    )


@router.post("/logout", response_model=BaseResponse[None])
async def logout(current_user: CurrentUser, db: DB):
    """Logout user by revoking all refresh tokens."""
    count = await services.logout_user(db, current_user.id)

    return BaseResponse(
        success=True,
        message=f"Logged out successfully. {count} session(s) terminated.",
    )


@router.get("/me", response_model=BaseResponse[ProfileResponse])
async def get_current_user_info(current_user: CurrentUser, db: DB):
    """Get current user's profile."""
    profile = await services.get_profile(db, current_user.id)
    return BaseResponse(success=True, data=ProfileResponse.model_validate(profile))


@router.put("/me", response_model=BaseResponse[ProfileResponse])
async def update_current_user(current_user: CurrentUser, data: ProfileUpdate, db: DB):
    """Update current user's name and phone."""
    profile = await services.update_me(db, current_user.id, data)
    return BaseResponse(
        success=True,
        message="Profile updated successfully",
        data=ProfileResponse.model_validate(profile),
    )


@router.post("/change-password", response_model=BaseResponse[None])
async def change_password(
    current_user: CurrentUser, password_data: ChangePasswordRequest, db: DB
):
    """Change current user's password."""
    await services.change_password(
        db=db,
        profile_id=current_user.id,
        current_password=password_data.current_password,
        new_password=password_data.new_password,
    )

    return BaseResponse(
        success=True,
        message="Password changed successfully. Please login again.",
    )
