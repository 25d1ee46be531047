"""Session token generation and validation

This module handles the JWT session tokens issued after a successful
magic-link or one-time-code login.

JWT Token Claims Structure:
===========================

Standard JWT Claims:
- sub (Subject): User ID as UUID string
  Example: "550e8400-e29b-41d4-a716-446655440000"

- iat (Issued At): Unix timestamp when token was created

- exp (Expiration): Unix timestamp when token expires
  (iat + JWT_EXPIRY_MINUTES)

Custom Claims:
- email: User's email address (lower-cased)
  Purpose: display and actor attribution without a database round trip

The active organization is NOT a claim. Users switch organizations without
re-authenticating, so the active org travels in the org_id cookie and is
re-checked against membership rows on every request.

Security Properties:
- Algorithm: HS256 (HMAC-SHA256 symmetric signing)
- Secret: JWT_SECRET setting
- No refresh tokens (request a new login link after expiry)
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, Any
from uuid import UUID
import jwt

from ..config import get_settings


def _get_jwt_secret() -> str:
    """Get JWT_SECRET from settings.

    Raises:
        ValueError: If JWT_SECRET is empty
    """
    secret = get_settings().JWT_SECRET
    if not secret:
        raise ValueError("JWT_SECRET is not configured")
    return secret


def get_jwt_expiry_minutes() -> int:
    return get_settings().JWT_EXPIRY_MINUTES


def create_access_token(user_id: UUID, email: str) -> str:
    """Create a JWT session token for an authenticated user.

    Args:
        user_id: User's UUID
        email: User's email address

    Returns:
        str: Signed JWT token
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expiration = now + timedelta(minutes=get_jwt_expiry_minutes())

    payload = {
        'sub': str(user_id),
        'email': email,
        'iat': int(now.timestamp()),
        'exp': int(expiration.timestamp()),
    }

    return jwt.encode(payload, _get_jwt_secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a JWT token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or tampered
    """
    settings = get_settings()
    return jwt.decode(token, _get_jwt_secret(), algorithms=[settings.JWT_ALGORITHM])
