"""Authentication utilities for JWT bearer tokens.

Admin clients present an access token whose ``sub`` claim is their integer
user ID; that ID becomes the owner of the codes they create.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any

import jwt
from jwt.exceptions import InvalidTokenError

from src.config import settings


# ============================================================================
# JWT Token Management
# ============================================================================

def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode in token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)

    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    to_encode.update({
        "exp": expire,
        "iat": now,
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT token.

    Raises:
        InvalidTokenError: If token is invalid or expired
    """
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm]
    )


# ============================================================================
# Token Validation Helpers
# ============================================================================

def validate_access_token(token: str) -> Dict[str, Any]:
    """
    Validate an access token and return its payload.

    Raises:
        ValueError: If token is invalid, expired, or wrong type
    """
    try:
        payload = decode_token(token)
    except InvalidTokenError as e:
        raise ValueError(f"Invalid token: {str(e)}")

    if payload.get("type") != "access":
        raise ValueError("Invalid token type")

    return payload


def get_token_user_id(token: str) -> int:
    """
    Extract the integer user ID from an access token.

    Raises:
        ValueError: If the token is invalid or carries no usable subject
    """
    payload = validate_access_token(token)
    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise ValueError("Invalid token subject")
