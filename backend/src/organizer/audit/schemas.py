"""Pydantic schemas for audit log endpoints.

Audit logs are read-only (no create/update/delete operations).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AuditLogResponse(BaseModel):
    """A single audit log entry."""
    id: UUID
    org_id: UUID
    actor_id: Optional[UUID] = Field(None, description="User who performed the action")
    action: str = Field(..., description="Event action (ORG_CREATED, INVITE_ACCEPTED, ...)")
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    metadata: Optional[dict] = Field(None, validation_alias="metadata_json")
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogListResponse(BaseModel):
    """Audit log page with pagination metadata."""
    entries: list[AuditLogResponse]
    total: int
    page: int
    per_page: int
