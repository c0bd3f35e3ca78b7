"""Authentication schemas for RentLine."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from .models import RoleSlug

# ----- Profile Schemas -----


class ProfileBase(BaseModel):
    """Base profile schema."""

    email: EmailStr
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)


class RegisterRequest(ProfileBase):
    """Schema for self sign-up. Admins cannot self-register."""

    password: str = Field(..., min_length=8, max_length=128)
    role: RoleSlug = RoleSlug.TENANT


class ProfileUpdate(BaseModel):
    """Schema for updating the caller's own profile."""

    full_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)


class ProfileResponse(ProfileBase):
    """Schema for profile response."""

    id: int
    uuid: UUID
    role: RoleSlug
    is_active: bool
    last_login: datetime | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    """Contact details embedded in other responses."""

    id: int
    full_name: str
    email: str
    phone: str | None = None

    class Config:
        from_attributes = True


# ----- Auth Schemas -----


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str
    remember_me: bool = False


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class RefreshTokenRequest(BaseModel):
    """Schema for refresh token request."""

    refresh_token: str


class ChangePasswordRequest(BaseModel):
    """Schema for password change request."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class AuthenticatedUser(BaseModel):
    """Authenticated user context for request handling."""

    id: int
    email: str
    full_name: str = ""
    role_slug: str
    is_active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role_slug == RoleSlug.ADMIN.value

    @property
    def is_landlord(self) -> bool:
        return self.role_slug == RoleSlug.LANDLORD.value

    @property
    def is_tenant(self) -> bool:
        return self.role_slug == RoleSlug.TENANT.value

    class Config:
        from_attributes = True
