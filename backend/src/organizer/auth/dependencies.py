"""FastAPI dependencies for authentication.

The session token is accepted from an ``Authorization: Bearer`` header (API
clients, tests) or from the HttpOnly ``access_token`` cookie set by the
login callback (browsers).

Usage:
    @router.get("/me")
    def me(current_user: CurrentUser):
        return {"email": current_user.email}

Organization-level authorization lives in organizer.dependencies.
"""

from typing import Annotated, Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.user import User
from .cookies import SESSION_COOKIE
from .jwt import decode_token

# auto_error=False so a missing header can fall back to the cookie
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE) or None


def _load_user(token: str, db: Session) -> User:
    """Validate a session token and load its user.

    Raises:
        HTTPException 401: If the token is invalid, expired, or the user is gone
    """
    try:
        payload = decode_token(token)
        user_id = UUID(payload.get("sub") or "")
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")
    except ValueError:
        raise _unauthorized("Invalid token claims")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("User not found")
    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Return the authenticated user.

    Args:
        request: Incoming request (cookie fallback)
        credentials: Bearer credentials, if any
        db: Database session

    Returns:
        User: The authenticated user

    Raises:
        HTTPException 401: If no token is present or it does not validate
    """
    token = _extract_token(request, credentials)
    if not token:
        raise _unauthorized("Not authenticated")
    return _load_user(token, db)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but returns None instead of raising.

    For endpoints that answer signed-out callers with their own message.
    """
    token = _extract_token(request, credentials)
    if not token:
        return None
    try:
        return _load_user(token, db)
    except HTTPException:
        return None


# Type alias for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
