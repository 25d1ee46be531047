"""Pydantic schemas for member and invite endpoints.

Request fields are plain strings so empty or malformed values reach the
handlers and get the same messages the web forms show.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class InviteCreateRequest(BaseModel):
    email: str = ""
    role: str = "member"


class InviteCreateResponse(BaseModel):
    """A freshly created invite.

    Attributes:
        invite_link: Absolute link containing the raw token (shown once)
        email: Normalized invitee address
        expires_at: When the link stops working
    """
    invite_link: str
    email: str
    expires_at: datetime


class InviteResponse(BaseModel):
    id: UUID
    email: str
    role: str
    invited_by: Optional[UUID]
    created_at: datetime
    expires_at: datetime
    is_expired: bool = False

    class Config:
        from_attributes = True


class InviteListResponse(BaseModel):
    invites: List[InviteResponse]


class AcceptInviteRequest(BaseModel):
    token: str = ""


class AcceptInviteResponse(BaseModel):
    org_id: UUID
    redirect: str = "/dashboard"


class MemberResponse(BaseModel):
    user_id: UUID
    email: str
    display_name: Optional[str] = None
    role: str
    created_at: datetime


class MemberListResponse(BaseModel):
    members: List[MemberResponse]


class TransferOwnershipRequest(BaseModel):
    new_owner_user_id: str = ""


class TransferOwnershipResponse(BaseModel):
    success: str = "Ownership transferred successfully."
