"""Password hashing and JWT token helpers."""

from datetime import datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

from app.core.config import get_settings

settings = get_settings()


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def _create_token(data: dict[str, Any], token_type: str, expires_delta: timedelta) -> str:
    to_encode = dict(data)
    to_encode.update({"exp": datetime.utcnow() + expires_delta, "type": token_type})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(
    data: dict[str, Any] | None = None,
    subject: int | str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token.

    Args:
        data: Claims to include in the token
        subject: Shortcut for the ``sub`` claim (stored as a string)
        expires_delta: Custom lifetime, defaults to the configured expiry

    Returns:
        Encoded JWT
    """
    claims = dict(data or {})
    if subject is not None:
        claims["sub"] = str(subject)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    return _create_token(claims, "access", expires_delta)


def create_refresh_token(data: dict[str, Any]) -> str:
    """Create a signed refresh token."""
    return _create_token(data, "refresh", timedelta(days=settings.refresh_token_expire_days))


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode a token, returning None when it is invalid or expired."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
