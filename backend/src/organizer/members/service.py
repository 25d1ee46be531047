"""Invites, member listing and ownership transfer.

Invite tokens are opaque random strings. Only their SHA-256 hash is stored,
so a leaked database cannot be turned back into working invite links.
"""

import re
import secrets
from datetime import timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from ..auth.otp import hash_token
from ..auth.roles import INVITABLE_ROLES, OrgRole, higher_role, normalize_role
from ..config import get_settings
from ..models.base import utcnow
from ..models.invite import OrgInvite
from ..models.org import LegacyOrganizationMember, OrgMember
from ..models.user import User
from ..tenancy.service import get_org_role, set_active_org

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")

INVITE_ERROR_MESSAGES = {
    "invalid": "This invite link is invalid.",
    "expired": "This invite link has expired.",
    "email": "This invite link was sent to a different email.",
    "accepted": "This invite link has already been used.",
}
DEFAULT_INVITE_ERROR = "We couldn't accept this invite. Please contact your admin."


class InviteError(Exception):
    """Raised when an invite cannot be created, revoked or accepted.

    Attributes:
        code: Machine-readable reason (invalid, expired, email, accepted, ...)
        message: User-facing message
        status_code: HTTP status the router should answer with
    """

    def __init__(self, code: str, message: Optional[str] = None, status_code: int = 400):
        self.code = code
        self.message = message or invite_error_message(code)
        self.status_code = status_code
        super().__init__(self.message)


class OwnershipTransferError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def invite_error_message(code: Optional[str]) -> str:
    """User-facing message for an invite acceptance failure code."""
    return INVITE_ERROR_MESSAGES.get(code or "", DEFAULT_INVITE_ERROR)


def normalize_invite_email(email: Optional[str]) -> str:
    """Trim and lower-case an invitee address.

    Raises:
        InviteError: If the address does not look like an email
    """
    email = (email or "").strip().lower()
    if not EMAIL_PATTERN.search(email):
        raise InviteError("invalid_email", "Enter a valid email address.")
    return email


def build_invite_link(base_url: str, token: str) -> str:
    return f"{base_url}/invite?token={token}"


def _is_member_email(db: Session, org_id: UUID, email: str) -> bool:
    user = db.query(User).filter(User.email == email).first()
    return bool(user) and get_org_role(db, org_id, user.id) is not None


def create_invite(db: Session, org_id: UUID, inviter: User, email: str, role: str) -> Tuple[OrgInvite, str]:
    """Create an invite and return it with its raw token.

    Earlier pending invites for the same address in the organization are
    revoked, so re-inviting always leaves exactly one usable link.

    Raises:
        InviteError: If the email or role is invalid, or the address already
            belongs to a member
    """
    email = normalize_invite_email(email)
    role = (role or OrgRole.MEMBER.value).strip()
    if role not in INVITABLE_ROLES:
        raise InviteError("invalid_role", "Role must be member or admin.")

    if _is_member_email(db, org_id, email):
        raise InviteError("already_member", "That person is already a member of this organization.", 409)

    now = utcnow()
    for pending in (
        db.query(OrgInvite)
        .filter(
            OrgInvite.org_id == org_id,
            OrgInvite.email == email,
            OrgInvite.accepted_at.is_(None),
            OrgInvite.revoked_at.is_(None),
        )
        .all()
    ):
        pending.revoked_at = now

    token = secrets.token_urlsafe(32)
    invite = OrgInvite(
        org_id=org_id,
        email=email,
        role=role,
        token_hash=hash_token(token),
        invited_by=inviter.id,
        created_at=now,
        expires_at=now + timedelta(hours=get_settings().INVITE_EXPIRES_IN_HOURS),
    )
    db.add(invite)
    db.flush()
    return invite, token


def list_pending_invites(db: Session, org_id: UUID) -> List[OrgInvite]:
    """Invites not yet accepted or revoked, newest first (expired ones included)."""
    return (
        db.query(OrgInvite)
        .filter(
            OrgInvite.org_id == org_id,
            OrgInvite.accepted_at.is_(None),
            OrgInvite.revoked_at.is_(None),
        )
        .order_by(OrgInvite.created_at.desc())
        .all()
    )


def revoke_invite(db: Session, org_id: UUID, invite_id: UUID) -> OrgInvite:
    """Revoke a pending invite.

    Raises:
        InviteError: 404 if the invite is not a pending invite of this org
    """
    invite = db.query(OrgInvite).filter(OrgInvite.id == invite_id, OrgInvite.org_id == org_id).first()
    if not invite or not invite.is_pending:
        raise InviteError("not_found", "Invite not found.", 404)

    invite.revoked_at = utcnow()
    return invite


def accept_invite(db: Session, user: User, token: str) -> OrgInvite:
    """Accept an invite on behalf of the signed-in user.

    An existing membership keeps its role unless the invite grants a higher
    one; acceptance never demotes. The organization becomes the user's
    active one.

    Raises:
        InviteError: with code invalid, expired, email or accepted
    """
    invite = db.query(OrgInvite).filter(OrgInvite.token_hash == hash_token(token.strip())).first()
    now = utcnow()

    if not invite or invite.revoked_at is not None:
        raise InviteError("invalid")
    if invite.accepted_at is None and invite.expired_by(now):
        raise InviteError("expired")
    if invite.email.lower() != user.email.lower():
        raise InviteError("email", status_code=403)
    if invite.accepted_at is not None:
        raise InviteError("accepted", status_code=409)

    legacy = (
        db.query(LegacyOrganizationMember)
        .filter(
            LegacyOrganizationMember.organization_id == invite.org_id,
            LegacyOrganizationMember.user_id == user.id,
        )
        .first()
    )
    member = db.query(OrgMember).filter(OrgMember.org_id == invite.org_id, OrgMember.user_id == user.id).first()
    if member:
        member.role = higher_role(member.role, invite.role)
    else:
        # A legacy role carries over to the new row
        role = invite.role
        if legacy:
            role = higher_role(normalize_role(legacy.role).value, invite.role)
        db.add(OrgMember(org_id=invite.org_id, user_id=user.id, role=role))

    if legacy:
        legacy.role = higher_role(legacy.role, invite.role)

    invite.accepted_at = now
    invite.accepted_by = user.id
    set_active_org(db, user.id, invite.org_id)
    return invite


def list_members(db: Session, org_id: UUID) -> List[Tuple[OrgMember, User]]:
    """Members of an organization with their user rows, oldest first."""
    return (
        db.query(OrgMember, User)
        .join(User, User.id == OrgMember.user_id)
        .filter(OrgMember.org_id == org_id)
        .order_by(OrgMember.created_at)
        .all()
    )


def _set_role_everywhere(db: Session, org_id: UUID, user_id: UUID, role: OrgRole) -> None:
    """Update a user's role in whichever membership schemas hold a row."""
    member = db.query(OrgMember).filter(OrgMember.org_id == org_id, OrgMember.user_id == user_id).first()
    if member:
        member.role = role.value

    legacy = (
        db.query(LegacyOrganizationMember)
        .filter(LegacyOrganizationMember.organization_id == org_id, LegacyOrganizationMember.user_id == user_id)
        .first()
    )
    if legacy:
        legacy.role = role.value


def transfer_ownership(db: Session, org_id: UUID, current_owner: User, new_owner_user_id: UUID) -> None:
    """Make another member the owner; the current owner becomes an admin.

    Raises:
        OwnershipTransferError: If the caller is not the owner, or the target
            is the caller or not a member of the organization
    """
    if get_org_role(db, org_id, current_owner.id) != OrgRole.OWNER.value:
        raise OwnershipTransferError("Only the current owner can transfer ownership.", 403)
    if new_owner_user_id == current_owner.id:
        raise OwnershipTransferError("You already own this organization.")
    if get_org_role(db, org_id, new_owner_user_id) is None:
        raise OwnershipTransferError("Select a member of this organization.")

    _set_role_everywhere(db, org_id, new_owner_user_id, OrgRole.OWNER)
    _set_role_everywhere(db, org_id, current_owner.id, OrgRole.ADMIN)
    db.flush()
