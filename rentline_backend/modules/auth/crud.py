"""CRUD operations for authentication module."""

from datetime import datetime

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.utils import utc_now
from .jwt_service import hash_refresh_token
from .models import Profile, RefreshToken, RoleSlug
from .password_service import hash_password

# ----- Profile CRUD -----


async def get_profile_by_id(db: AsyncSession, profile_id: int) -> Profile | None:
    """Get a profile by ID."""
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def get_profile_for_update(db: AsyncSession, profile_id: int) -> Profile | None:
    """Load a profile with its row locked until the transaction ends.

    Writes that check a per-profile total (such as the payout balance) take
    this lock first so they run one at a time.
    """
    result = await db.execute(
        select(Profile)
        .where(Profile.id == profile_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    """Get a profile by email (case-insensitive)."""
    result = await db.execute(
        select(Profile).where(func.lower(Profile.email) == email.lower())
    )
    return result.scalar_one_or_none()


async def create_profile(
    db: AsyncSession,
    email: str,
    password: str,
    full_name: str,
    role: RoleSlug,
    phone: str | None = None,
) -> Profile:
    """Create a new profile with a hashed password."""
    profile = Profile(
        email=email.lower(),
        password_hash=hash_password(password),
        full_name=full_name,
        phone=phone,
        role=role,
        is_active=True,
        failed_login_attempts=0,
    )
    db.add(profile)
    await db.flush()
    return profile


async def update_profile(db: AsyncSession, profile: Profile, **kwargs) -> Profile:
    """Update profile fields."""
    for key, value in kwargs.items():
        if hasattr(profile, key):
            setattr(profile, key, value)
    await db.flush()
    return profile


async def update_profile_password(
    db: AsyncSession, profile: Profile, new_password: str
) -> None:
    """Update profile's password."""
    profile.password_hash = hash_password(new_password)
    await db.flush()


async def update_last_login(db: AsyncSession, profile: Profile) -> None:
    """Update last login timestamp and reset failed attempts."""
    profile.last_login = utc_now()
    profile.failed_login_attempts = 0
    profile.locked_until = None
    await db.flush()


async def increment_failed_login(db: AsyncSession, profile: Profile) -> None:
    """Increment failed login attempts."""
    profile.failed_login_attempts = (profile.failed_login_attempts or 0) + 1
    await db.flush()


async def lock_profile(db: AsyncSession, profile: Profile, until: datetime) -> None:
    """Lock a profile until the given time and restart the attempt count."""
    profile.locked_until = until
    profile.failed_login_attempts = 0
    await db.flush()


async def count_profiles_by_role(db: AsyncSession) -> dict[str, int]:
    """Count profiles grouped by role."""
    result = await db.execute(
        select(Profile.role, func.count(Profile.id)).group_by(Profile.role)
    )
    counts = {role.value: 0 for role in RoleSlug}
    for role, count in result.all():
        key = role.value if isinstance(role, RoleSlug) else str(role)
        counts[key] = count
    return counts


async def any_admin_exists(db: AsyncSession) -> bool:
    """Check whether an admin profile has been created."""
    result = await db.execute(
        select(func.count(Profile.id)).where(Profile.role == RoleSlug.ADMIN)
    )
    return (result.scalar() or 0) > 0


# ----- Refresh Token CRUD -----


async def create_refresh_token(
    db: AsyncSession,
    profile: Profile,
    token: str,
    expires_at: datetime,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> RefreshToken:
    """Store a new refresh token."""
    refresh_token = RefreshToken(
        profile_id=profile.id,
        token_hash=hash_refresh_token(token),
        expires_at=expires_at,
        user_agent=user_agent[:500] if user_agent else None,
        ip_address=ip_address,
    )
    db.add(refresh_token)
    await db.flush()
    return refresh_token


async def get_refresh_token_by_hash(
    db: AsyncSession, token_hash: str
) -> RefreshToken | None:
    """Get refresh token by its hash."""
    result = await db.execute(
        select(RefreshToken).where(RefreshToken.token_hash == token_hash)
    )
    return result.scalar_one_or_none()


async def revoke_refresh_token(db: AsyncSession, token: RefreshToken) -> None:
    """Revoke a refresh token."""
    token.revoked_at = utc_now()
    await db.flush()


async def revoke_all_profile_tokens(db: AsyncSession, profile_id: int) -> int:
    """Revoke all active refresh tokens for a profile.

    Returns:
        Number of tokens revoked
    """
    result = await db.execute(
        update(RefreshToken)
        .where(
            and_(
                RefreshToken.profile_id == profile_id,
                RefreshToken.revoked_at.is_(None),
            )
        )
        .values(revoked_at=utc_now())
    )
    return result.rowcount or 0
