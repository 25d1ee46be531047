"""Middleware for tenant context extraction.

Attaches the org_id cookie to request.state and the logging context so log
lines can be correlated per organization. It makes no authorization
decisions; membership is checked by the active-org dependencies.
"""

from typing import Callable
from uuid import UUID

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..auth.cookies import ORG_COOKIE
from ..observability.context import bind_org


class TenantContextMiddleware(BaseHTTPMiddleware):
    """Attach the org_id cookie (UUID or None) to request.state.org_id.

    Usage:
        app.add_middleware(TenantContextMiddleware)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request.state.org_id = None

        raw = request.cookies.get(ORG_COOKIE)
        if raw:
            try:
                request.state.org_id = UUID(raw)
            except ValueError:
                # Garbage cookie; the resolver ignores it too
                pass

        bind_org(request.state.org_id)
        try:
            return await call_next(request)
        finally:
            bind_org(None)

