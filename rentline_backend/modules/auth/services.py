"""Authentication business logic services."""

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
    ValidationError,
)
from ...core.logging import get_logger, log_event
from ...core.utils import as_utc, sanitize_string, utc_now
from . import crud
from .jwt_service import (
    create_access_token,
    create_refresh_token,
    get_token_expiry_seconds,
    hash_refresh_token,
)
from .models import Profile, RoleSlug
from .password_service import verify_password
from .schemas import ProfileUpdate, RegisterRequest, TokenResponse

logger = get_logger(__name__)


def _access_token_for(profile: Profile) -> str:
    return create_access_token(
        profile_id=profile.id,
        email=profile.email,
        role_slug=profile.role.value,
        full_name=profile.full_name,
    )


async def _issue_tokens(
    db: AsyncSession,
    profile: Profile,
    remember_me: bool = False,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    refresh_token, refresh_expires = create_refresh_token(remember_me)
    await crud.create_refresh_token(
        db=db,
        profile=profile,
        token=refresh_token,
        expires_at=refresh_expires,
        user_agent=user_agent,
        ip_address=ip_address,
    )
    return TokenResponse(
        access_token=_access_token_for(profile),
        refresh_token=refresh_token,
        token_type="bearer",
        expires_in=get_token_expiry_seconds(),
    )


async def register_profile(db: AsyncSession, data: RegisterRequest) -> Profile:
    """Self sign-up as a tenant or landlord.

    Raises:
        ValidationError: If the admin role is requested
        ResourceAlreadyExistsError: If the email is taken
    """
    if data.role == RoleSlug.ADMIN:
        raise ValidationError("Admin accounts cannot be self-registered", field="role")

    if await crud.get_profile_by_email(db, data.email):
        raise ResourceAlreadyExistsError("Profile", data.email)

    profile = await crud.create_profile(
        db,
        email=data.email,
        password=data.password,
        full_name=data.full_name.strip(),
        role=data.role,
        phone=sanitize_string(data.phone, 32),
    )
    await db.commit()

    log_event(logger, "profile_registered", profile_id=profile.id, role=profile.role.value)
    return profile


async def authenticate_user(
    db: AsyncSession,
    email: str,
    password: str,
    remember_me: bool = False,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[Profile, TokenResponse]:
    """Authenticate a profile and return tokens.

    Failed attempts are counted; reaching ``max_login_attempts`` locks the
    profile for ``lockout_duration_minutes``.

    Raises:
        AuthenticationError: If authentication fails
    """
    profile = await crud.get_profile_by_email(db, email)
    if not profile:
        raise AuthenticationError("Invalid email or password")

    if profile.is_locked:
        remaining = (as_utc(profile.locked_until) - utc_now()).seconds // 60
        raise AuthenticationError(
            f"Account is locked. Try again in {remaining + 1} minutes."
        )

    if not profile.is_active:
        raise AuthenticationError("Account is disabled")

    if not verify_password(password, profile.password_hash):
        await crud.increment_failed_login(db, profile)

        if profile.failed_login_attempts >= settings.max_login_attempts:
            lock_until = utc_now() + timedelta(
                minutes=settings.lockout_duration_minutes
            )
            await crud.lock_profile(db, profile, lock_until)
            await db.commit()
            logger.warning(
                "Profile locked after failed logins",
                extra={"profile_id": profile.id},
            )
            raise AuthenticationError(
                f"Account locked due to too many failed attempts. "
                f"Try again in {settings.lockout_duration_minutes} minutes."
            )

        await db.commit()
        remaining_attempts = settings.max_login_attempts - profile.failed_login_attempts
        raise AuthenticationError(
            f"Invalid email or password. {remaining_attempts} attempts remaining."
        )

    await crud.update_last_login(db, profile)
    tokens = await _issue_tokens(db, profile, remember_me, user_agent, ip_address)
    await db.commit()

    return profile, tokens


async def refresh_access_token(
    db: AsyncSession,
    refresh_token: str,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> TokenResponse:
    """Rotate a refresh token and issue a fresh access token.

    Raises:
        AuthenticationError: If refresh token is invalid, revoked or expired
    """
    stored_token = await crud.get_refresh_token_by_hash(
        db, hash_refresh_token(refresh_token)
    )

    if not stored_token:
        raise AuthenticationError("Invalid refresh token")

    if stored_token.is_revoked:
        raise AuthenticationError("Refresh token has been revoked")

    if stored_token.is_expired:
        raise AuthenticationError("Refresh token has expired")

    profile = await crud.get_profile_by_id(db, stored_token.profile_id)
    if not profile or not profile.is_active:
        raise AuthenticationError("User not found or inactive")

    await crud.revoke_refresh_token(db, stored_token)
    tokens = await _issue_tokens(db, profile, False, user_agent, ip_address)
    await db.commit()

    return tokens


async def logout_user(db: AsyncSession, profile_id: int) -> int:
    """Revoke all refresh tokens of a profile.

    Returns:
        Number of tokens revoked
    """
    count = await crud.revoke_all_profile_tokens(db, profile_id)
    await db.commit()
    return count


async def get_profile(db: AsyncSession, profile_id: int) -> Profile:
    profile = await crud.get_profile_by_id(db, profile_id)
    if not profile:
        raise ResourceNotFoundError("Profile", profile_id)
    return profile


async def update_me(db: AsyncSession, profile_id: int, data: ProfileUpdate) -> Profile:
    """Update the caller's name and phone."""
    profile = await get_profile(db, profile_id)

    updates = data.model_dump(exclude_unset=True)
    if "full_name" in updates and updates["full_name"] is not None:
        updates["full_name"] = updates["full_name"].strip()
    if "phone" in updates:
        updates["phone"] = sanitize_string(updates["phone"], 32)

    await crud.update_profile(db, profile, **updates)
    await db.commit()
    return profile


async def change_password(
    db: AsyncSession,
    profile_id: int,
    current_password: str,
    new_password: str,
) -> None:
    """Change a profile's password and revoke its sessions.

    Raises:
        ResourceNotFoundError: If profile not found
        ValidationError: If current password is incorrect
    """
    profile = await get_profile(db, profile_id)

    if not verify_password(current_password, profile.password_hash):
        raise ValidationError("Current password is incorrect")

    await crud.update_profile_password(db, profile, new_password)
    await crud.revoke_all_profile_tokens(db, profile_id)
    await db.commit()

    log_event(logger, "password_changed", profile_id=profile_id)


async def create_initial_admin(
    db: AsyncSession,
    admin_email: str,
    admin_password: str,
    admin_full_name: str,
) -> Profile:
    """Create the first admin profile.

    Used for seeding a fresh database.

    Raises:
        ValidationError: If an admin already exists
        ResourceAlreadyExistsError: If the email is taken
    """
    if await crud.any_admin_exists(db):
        raise ValidationError("An admin profile already exists. Cannot seed.")

    if await crud.get_profile_by_email(db, admin_email):
        raise ResourceAlreadyExistsError("Profile", admin_email)

    profile = await crud.create_profile(
        db,
        email=admin_email,
        password=admin_password,
        full_name=admin_full_name,
        role=RoleSlug.ADMIN,
    )
    await db.commit()

    log_event(logger, "admin_created", profile_id=profile.id)
    return profile
