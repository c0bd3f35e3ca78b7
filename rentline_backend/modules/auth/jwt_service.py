"""JWT service for RentLine authentication."""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone

import jwt

from ...config import settings


def create_access_token(
    profile_id: int,
    email: str,
    role_slug: str,
    full_name: str = "",
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.access_token_expire_minutes)

    payload = {
        "sub": str(profile_id),
        "email": email,
        "full_name": full_name,
        "role": role_slug,
        "exp": expire,
        "iat": now,
        "type": "access",
    }

    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(remember_me: bool = False) -> tuple[str, datetime]:
    """Create a refresh token.

    Returns:
        Tuple of (token_string, expiry_datetime)
    """
    token = secrets.token_urlsafe(32)
    if remember_me:
        days = settings.refresh_token_remember_days
    else:
        days = settings.refresh_token_expire_days
    expires_at = datetime.now(timezone.utc) + timedelta(days=days)
    return token, expires_at


def hash_refresh_token(token: str) -> str:
    """Hash a refresh token for storage."""
    return hashlib.sha256(token.encode()).hexdigest()


def decode_access_token(token: str) -> dict | None:
    """Decode and validate a JWT access token.

    Returns:
        Token payload if valid, None if invalid or expired.
    """
    try:
        payload = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    if payload.get("type") != "access":
        return None
    return payload


def get_token_expiry_seconds() -> int:
    """Get access token expiry in seconds."""
    return settings.access_token_expire_minutes * 60
