"""Per-request correlation context.

Context variables are async-safe, so every log line emitted while handling a
request can carry its request ID and the active organization.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
org_id_var: ContextVar[Optional[str]] = ContextVar("org_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def bind_org(org_id) -> None:
    org_id_var.set(str(org_id) if org_id else None)
