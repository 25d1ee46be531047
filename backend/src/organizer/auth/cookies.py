"""Session and active-organization cookies."""

from uuid import UUID

from fastapi import Response

from ..config import get_settings

SESSION_COOKIE = "access_token"
ORG_COOKIE = "org_id"


def set_session_cookie(response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.JWT_EXPIRY_MINUTES * 60,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def set_org_cookie(response: Response, org_id: UUID) -> None:
    """Remember the active organization; readable by the browser app."""
    response.set_cookie(
        ORG_COOKIE,
        str(org_id),
        path="/",
        samesite="lax",
        secure=get_settings().COOKIE_SECURE,
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(ORG_COOKIE, path="/")
