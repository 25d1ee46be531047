"""Absolute links for emails and invites."""

from fastapi import Request

from .config import get_settings


def get_base_url(request: Request) -> str:
    """Public base URL of the app, without a trailing slash.

    APP_URL wins when set. Otherwise the URL is rebuilt from the proxy
    headers (x-forwarded-proto, default https, and x-forwarded-host or host).
    Returns an empty string when neither is available.
    """
    app_url = get_settings().APP_URL
    if app_url:
        return app_url.rstrip("/")

    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or ""
    proto = request.headers.get("x-forwarded-proto") or "https"
    return f"{proto}://{host}" if host else ""
