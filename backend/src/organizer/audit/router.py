"""Audit log query endpoint (admin or owner of the active organization).

Audit logs are immutable and cannot be created, updated, or deleted
through the API.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth.roles import OrgRole
from ..database import get_db
from ..dependencies import ActiveOrg, require_org_role
from ..models.audit_log import AuditLog
from .schemas import AuditLogListResponse, AuditLogResponse

router = APIRouter(prefix="/audit", tags=["Audit Logs"])


@router.get("", response_model=AuditLogListResponse, summary="Query audit logs")
def query_audit_logs(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_org_role(OrgRole.ADMIN)),
    action: Optional[str] = Query(None, description="Filter by action type (e.g., INVITE_CREATED)"),
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    per_page: int = Query(50, ge=1, le=100, description="Entries per page (max 100)"),
) -> AuditLogListResponse:
    """Query the active organization's audit log, newest first.

    Args:
        db: Database session
        active: Active organization context (admin or owner)
        action: Optional action filter
        page: Page number (1-indexed)
        per_page: Entries per page (max 100)

    Returns:
        AuditLogListResponse: Filtered and paginated audit log entries
    """
    query = db.query(AuditLog).filter(AuditLog.org_id == active.org.id)
    if action:
        query = query.filter(AuditLog.action == action)

    total = query.count()
    entries = (
        query.order_by(AuditLog.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )

    return AuditLogListResponse(
        entries=[AuditLogResponse.model_validate(entry) for entry in entries],
        total=total,
        page=page,
        per_page=per_page,
    )
