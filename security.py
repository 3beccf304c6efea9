"""
Security utilities
Password hashing and access token handling
"""

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt

from config import settings


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against its bcrypt hash"""
    try:
        return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storage"""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def create_access_token(
    subject: str,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> Dict[str, Any]:
    """
    Create a signed access token.

    Returns:
        Dict with the encoded token, its id (jti) and expiry
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expires_at = datetime.utcnow() + expires_delta
    jti = uuid.uuid4().hex

    claims = {"sub": subject, "role": role, "jti": jti, "exp": expires_at}
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    return {"token": token, "jti": jti, "expires_at": expires_at}


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode a token, raising JWTError on failure or expiry"""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
