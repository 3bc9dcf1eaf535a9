"""
Security utilities for the MetaHire CRM API.
Consolidated JWT and password handling.
"""
from datetime import datetime, timedelta
from typing import Optional
import uuid

import jwt
import bcrypt

from metahire_crm.config import settings
from metahire_crm.core.timeutils import utcnow


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """Hash a password."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def create_access_token(
    data: dict,
    jti: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> tuple[str, datetime]:
    """
    Create a JWT access token.

    Args:
        data: Payload data (should include profile_id)
        jti: Token id; names the server-side AuthSession row
        expires_delta: Custom expiration time

    Returns:
        Encoded JWT string and its expiry
    """
    to_encode = data.copy()

    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({
        "exp": expire,
        "iat": utcnow(),
        "type": "access",
        "jti": jti or str(uuid.uuid4())
    })

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt, expire


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded payload dict or None if invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return payload
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str) -> Optional[dict]:
    """Return the payload of a valid access token, None otherwise."""
    payload = decode_token(token)
    if payload and payload.get("type") == "access":
        return payload
    return None
