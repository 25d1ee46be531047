"""Pydantic schemas for organization endpoints."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class OrgCreateRequest(BaseModel):
    name: str = ""


class OrgCreateResponse(BaseModel):
    id: UUID


class OrgSummary(BaseModel):
    """An organization the caller belongs to."""
    id: UUID
    name: str
    slug: str
    role: str
    is_active: bool = False


class OrgListResponse(BaseModel):
    orgs: List[OrgSummary]


class SetActiveOrgRequest(BaseModel):
    org_id: Optional[str] = None


class ActiveOrgResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    role: str
