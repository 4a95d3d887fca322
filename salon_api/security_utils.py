"""
Password hashing and session token helpers
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError
from jose import jwt as jose_jwt

# Password hashing
from passlib.context import CryptContext

from .config import Settings

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password_bcrypt(password: str) -> str:
    """Hash password using bcrypt"""
    return pwd_context.hash(password)


def verify_password_bcrypt(plain_password: str, hashed_password: str) -> bool:
    """Verify password against bcrypt hash"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# SESSION TOKENS
# ============================================================================


def create_jwt_token(
    data: dict[str, Any], settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT token

    Args:
        data: Data to encode in the token
        settings: Supplies the signing key, algorithm and default lifetime
        expires_delta: Token expiration time (defaults to settings.jwt_expires_minutes)
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.jwt_expires_minutes)

    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jose_jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_jwt_token(token: str, settings: Settings) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None
