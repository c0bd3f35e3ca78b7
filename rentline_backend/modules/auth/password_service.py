"""Password hashing for RentLine authentication."""

from passlib.hash import pbkdf2_sha256 as hasher


def hash_password(password: str) -> str:
    """Hash a plain-text password."""
    return hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plain-text password against a stored hash."""
    try:
        return hasher.verify(password, password_hash)
    except ValueError:
        # Malformed hash in storage
        return False
