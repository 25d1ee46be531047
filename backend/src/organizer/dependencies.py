"""Global FastAPI dependencies for tenant isolation.

This module provides:
- require_active_org: resolve the caller's active organization
- require_org_role: active organization plus a minimum role

Every tenant-scoped endpoint takes an ActiveOrg and filters its queries on
active.org.id. The org_id cookie is only a hint; membership is re-checked on
every request, so a stale or forged cookie never grants access.

Usage:
    @router.get("/employees")
    def list_employees(
        db: Session = Depends(get_db),
        active: ActiveOrg = Depends(require_active_org),
    ):
        return db.query(Employee).filter(Employee.org_id == active.org.id).all()
"""

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from .auth.cookies import ORG_COOKIE, set_org_cookie
from .auth.dependencies import get_current_user
from .auth.roles import OrgRole, has_permission
from .database import get_db
from .models.org import Org
from .models.user import User
from .tenancy.service import resolve_active_org

NO_ACTIVE_ORG_DETAIL = "Select an organization."


@dataclass
class ActiveOrg:
    """Request-scoped tenant context."""
    org: Org
    role: str
    user: User


def _resolve(request: Request, response: Response, db: Session, user: User, no_org_detail: str) -> ActiveOrg:
    resolved = resolve_active_org(db, user.id, request.cookies.get(ORG_COOKIE))
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=no_org_detail)

    org = db.get(Org, resolved.org_id)
    if org is None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=no_org_detail)

    if resolved.source != "cookie":
        # Pin the resolved org so later requests take the fast path
        set_org_cookie(response, org.id)

    return ActiveOrg(org=org, role=resolved.role, user=user)


def require_active_org(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ActiveOrg:
    """Resolve the active organization for the authenticated user.

    Args:
        request: Incoming request (org_id cookie)
        response: Outgoing response (org_id cookie is set on auto-selection)
        db: Database session
        current_user: Authenticated user

    Returns:
        ActiveOrg: organization, caller's role and the user

    Raises:
        HTTPException 401: If not authenticated
        HTTPException 409: If no organization can be resolved
    """
    return _resolve(request, response, db, current_user, NO_ACTIVE_ORG_DETAIL)


def require_org_role(
    required_role: OrgRole,
    no_org_detail: str = NO_ACTIVE_ORG_DETAIL,
    forbidden_detail: str = "You don't have permission to do that.",
) -> Callable:
    """Create a dependency that resolves the active org and enforces a role.

    Higher roles inherit permissions from lower roles
    (owner > admin > member).

    Args:
        required_role: Minimum role required to access the endpoint
        no_org_detail: Message when no active organization can be resolved
        forbidden_detail: Message when the caller's role is insufficient

    Returns:
        Callable: FastAPI dependency returning ActiveOrg

    Example:
        @router.post("/invites")
        def create_invite(
            active: ActiveOrg = Depends(require_org_role(OrgRole.ADMIN)),
        ):
            ...
    """

    def role_dependency(
        request: Request,
        response: Response,
        db: Session = Depends(get_db),
        current_user: User = Depends(get_current_user),
    ) -> ActiveOrg:
        active = _resolve(request, response, db, current_user, no_org_detail)
        if not has_permission(active.role, required_role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=forbidden_detail)
        return active

    return role_dependency
