"""Member management endpoints.

- /members/invites: create, list and revoke invites (admin or owner)
- /members: list members (admin or owner)
- /members/transfer-ownership: hand the organization to another member (owner)
- /invites/accept: accept an invite as the signed-in user
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from ..audit.service import log_from_request
from ..auth.cookies import set_org_cookie
from ..auth.dependencies import get_optional_user
from ..auth.roles import OrgRole
from ..database import get_db
from ..dependencies import ActiveOrg, require_org_role
from ..links import get_base_url
from ..models.base import utcnow
from ..models.user import User
from ..observability.logging_config import get_logger
from ..observability.metrics import invite_events_total
from .schemas import (
    AcceptInviteRequest,
    AcceptInviteResponse,
    InviteCreateRequest,
    InviteCreateResponse,
    InviteListResponse,
    InviteResponse,
    MemberListResponse,
    MemberResponse,
    TransferOwnershipRequest,
    TransferOwnershipResponse,
)
from .service import (
    InviteError,
    OwnershipTransferError,
    accept_invite,
    build_invite_link,
    create_invite,
    list_members,
    list_pending_invites,
    revoke_invite,
    transfer_ownership,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])
invites_router = APIRouter(prefix="/invites", tags=["Members"])

require_inviter = require_org_role(
    OrgRole.ADMIN,
    no_org_detail="Select an organization before inviting.",
    forbidden_detail="You don't have permission to invite members.",
)
require_member_admin = require_org_role(
    OrgRole.ADMIN,
    forbidden_detail="You don't have permission to manage members.",
)
require_owner = require_org_role(
    OrgRole.OWNER,
    no_org_detail="Select an organization before transferring ownership.",
    forbidden_detail="Only the current owner can transfer ownership.",
)


@router.post("/invites", response_model=InviteCreateResponse, status_code=status.HTTP_201_CREATED)
def create_member_invite(
    body: InviteCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_inviter),
) -> InviteCreateResponse:
    """Invite someone to the active organization.

    Returns the invite link once; only a hash of its token is stored.

    Raises:
        HTTPException 400: If the email or role is invalid
        HTTPException 403: If the caller is not an admin or owner
        HTTPException 409: If the address already belongs to a member
        HTTPException 500: If no public base URL can be determined
    """
    base_url = get_base_url(request)

    try:
        invite, token = create_invite(db, active.org.id, active.user, body.email, body.role)
    except InviteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    if not base_url:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing app URL configuration.",
        )

    log_from_request(
        db=db,
        request=request,
        org_id=active.org.id,
        action="INVITE_CREATED",
        actor_id=active.user.id,
        entity_type="invite",
        entity_id=invite.id,
        metadata={"email": invite.email, "role": invite.role},
    )
    db.commit()

    invite_events_total.labels(event="created").inc()
    return InviteCreateResponse(
        invite_link=build_invite_link(base_url, token),
        email=invite.email,
        expires_at=invite.expires_at,
    )


@router.get("/invites", response_model=InviteListResponse)
def list_invites(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_member_admin),
) -> InviteListResponse:
    """Pending invites of the active organization, newest first."""
    now = utcnow()
    invites = [
        InviteResponse(
            id=invite.id,
            email=invite.email,
            role=invite.role,
            invited_by=invite.invited_by,
            created_at=invite.created_at,
            expires_at=invite.expires_at,
            is_expired=invite.expired_by(now),
        )
        for invite in list_pending_invites(db, active.org.id)
    ]
    return InviteListResponse(invites=invites)


@router.delete("/invites/{invite_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_member_invite(
    invite_id: UUID,
    request: Request,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_member_admin),
) -> None:
    """Revoke a pending invite so its link stops working.

    Raises:
        HTTPException 404: If the invite is unknown, not pending, or belongs
            to another organization
    """
    try:
        invite = revoke_invite(db, active.org.id, invite_id)
    except InviteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    log_from_request(
        db=db,
        request=request,
        org_id=active.org.id,
        action="INVITE_REVOKED",
        actor_id=active.user.id,
        entity_type="invite",
        entity_id=invite.id,
        metadata={"email": invite.email},
    )
    db.commit()
    invite_events_total.labels(event="revoked").inc()


@router.get("", response_model=MemberListResponse)
def list_org_members(
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_member_admin),
) -> MemberListResponse:
    """Members of the active organization, oldest first."""
    return MemberListResponse(
        members=[
            MemberResponse(
                user_id=member.user_id,
                email=user.email,
                display_name=user.display_name,
                role=member.role,
                created_at=member.created_at,
            )
            for member, user in list_members(db, active.org.id)
        ]
    )


@router.post("/transfer-ownership", response_model=TransferOwnershipResponse)
def transfer_org_ownership(
    body: TransferOwnershipRequest,
    request: Request,
    db: Session = Depends(get_db),
    active: ActiveOrg = Depends(require_owner),
) -> TransferOwnershipResponse:
    """Make another member the owner; the caller becomes an admin.

    Raises:
        HTTPException 400: If no member was selected or the target is invalid
        HTTPException 403: If the caller is not the owner
    """
    raw = body.new_owner_user_id.strip()
    if not raw:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select a member to transfer ownership.")
    try:
        new_owner_id = UUID(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select a member of this organization.")

    try:
        transfer_ownership(db, active.org.id, active.user, new_owner_id)
    except OwnershipTransferError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    log_from_request(
        db=db,
        request=request,
        org_id=active.org.id,
        action="OWNERSHIP_TRANSFERRED",
        actor_id=active.user.id,
        entity_type="org",
        entity_id=active.org.id,
        metadata={"from_user_id": str(active.user.id), "to_user_id": str(new_owner_id)},
    )
    db.commit()

    logger.info("Ownership transferred", extra={"org_id": str(active.org.id)})
    return TransferOwnershipResponse()


@invites_router.post("/accept", response_model=AcceptInviteResponse)
def accept_org_invite(
    body: AcceptInviteRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
) -> AcceptInviteResponse:
    """Accept an invite with the token from an invite link.

    Raises:
        HTTPException 400: If the token is empty, unknown, revoked or expired
        HTTPException 401: If the caller is signed out
        HTTPException 403: If the invite was sent to another address
        HTTPException 409: If the invite was already used
    """
    token = body.token.strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid invite link.")
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please sign in to accept your invite.",
        )

    try:
        invite = accept_invite(db, current_user, token)
    except InviteError as e:
        invite_events_total.labels(event="rejected").inc()
        logger.info("Invite rejected", extra={"reason": e.code})
        raise HTTPException(status_code=e.status_code, detail=e.message)

    log_from_request(
        db=db,
        request=request,
        org_id=invite.org_id,
        action="INVITE_ACCEPTED",
        actor_id=current_user.id,
        entity_type="invite",
        entity_id=invite.id,
        metadata={"email": invite.email, "role": invite.role},
    )
    db.commit()

    invite_events_total.labels(event="accepted").inc()
    set_org_cookie(response, invite.org_id)
    return AcceptInviteResponse(org_id=invite.org_id)
