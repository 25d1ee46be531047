"""Audit logging service for organization events.

This service provides a centralized interface for creating immutable audit log
entries. All security-relevant organization events go through this service.

Audit Events:
- ORG_CREATED, ACTIVE_ORG_CHANGED
- INVITE_CREATED, INVITE_REVOKED, INVITE_ACCEPTED
- OWNERSHIP_TRANSFERRED
"""

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import Request
from sqlalchemy.orm import Session

from ..models.audit_log import AuditLog


def get_client_ip(request: Request) -> Optional[str]:
    """Client IP, preferring the first X-Forwarded-For hop."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else None


def log_audit_event(
    db: Session,
    org_id: UUID,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> AuditLog:
    """Create an audit log entry.

    The entry is flushed, not committed; it becomes durable with the caller's
    transaction so a failed operation leaves no audit trail behind.

    Args:
        db: Database session
        org_id: Organization ID
        action: Event action (e.g., "ORG_CREATED", "INVITE_ACCEPTED")
        actor_id: User who performed the action (None for system events)
        entity_type: Type of entity affected (e.g., "org", "invite")
        entity_id: ID of affected entity (UUIDs and vendor ids are stored as text)
        metadata: Additional context as JSON (e.g., {"email": ..., "role": ...})
        ip_address: Client IP address (IPv4 or IPv6)
        user_agent: Client User-Agent header

    Returns:
        AuditLog: The created audit log entry
    """
    audit_entry = AuditLog(
        org_id=org_id,
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id) if entity_id is not None else None,
        metadata_json=metadata,
        ip_address=ip_address,
        user_agent=user_agent,
    )

    db.add(audit_entry)
    db.flush()

    return audit_entry


def log_from_request(
    db: Session,
    request: Request,
    org_id: UUID,
    action: str,
    actor_id: Optional[UUID] = None,
    entity_type: Optional[str] = None,
    entity_id: Optional[Any] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Create audit log entry extracting IP and User-Agent from the request.

    Example:
        log_from_request(
            db=db,
            request=request,
            org_id=org.id,
            action="INVITE_CREATED",
            actor_id=current_user.id,
            entity_type="invite",
            entity_id=invite.id,
            metadata={"email": invite.email, "role": invite.role},
        )
    """
    return log_audit_event(
        db=db,
        org_id=org_id,
        action=action,
        actor_id=actor_id,
        entity_type=entity_type,
        entity_id=entity_id,
        metadata=metadata,
        ip_address=get_client_ip(request),
        user_agent=request.headers.get("User-Agent"),
    )
