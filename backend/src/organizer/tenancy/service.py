"""Organizations, membership resolution and the active organization.

Membership lives in two overlapping schemas:

- org_members (current): org_id, user_id, role in owner|admin|member
- organization_members (legacy): organization_id, user_id, free-text role

Reads consult the current schema first and fall back to the legacy one.
Writes that create or change ownership go to both so either reader sees
the same answer.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..auth.roles import OrgRole, normalize_role
from ..models.org import LegacyOrganizationMember, Org, OrgMember, UserSettings
from ..models.user import User

SLUG_MAX_LENGTH = 90


class OrgError(Exception):
    """Raised when an organization operation is rejected.

    Attributes:
        message: User-facing message
        status_code: HTTP status the router should answer with
    """

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


@dataclass
class Membership:
    org_id: UUID
    role: str
    created_at: Optional[datetime] = None


@dataclass
class ResolvedOrg:
    """The active organization for a request and how it was found.

    source is "cookie", "settings" or "single_membership".
    """
    org_id: UUID
    role: str
    source: str


def list_memberships(db: Session, user_id: UUID) -> List[Membership]:
    """Memberships from org_members, or from the legacy table when there are none."""
    rows = db.query(OrgMember).filter(OrgMember.user_id == user_id).order_by(OrgMember.created_at).all()
    if rows:
        return [Membership(org_id=r.org_id, role=r.role, created_at=r.created_at) for r in rows]

    legacy = (
        db.query(LegacyOrganizationMember)
        .filter(LegacyOrganizationMember.user_id == user_id)
        .order_by(LegacyOrganizationMember.created_at)
        .all()
    )
    return [
        Membership(org_id=r.organization_id, role=normalize_role(r.role).value, created_at=r.created_at)
        for r in legacy
    ]


def get_org_role(db: Session, org_id: UUID, user_id: UUID) -> Optional[str]:
    """The user's role in an organization, or None when not a member.

    Legacy roles are normalized, so "staff" comes back as "member".
    """
    member = db.query(OrgMember).filter(OrgMember.org_id == org_id, OrgMember.user_id == user_id).first()
    if member:
        return member.role

    legacy = (
        db.query(LegacyOrganizationMember)
        .filter(LegacyOrganizationMember.organization_id == org_id, LegacyOrganizationMember.user_id == user_id)
        .first()
    )
    if legacy:
        return normalize_role(legacy.role).value
    return None


def has_any_membership(db: Session, user_id: UUID) -> bool:
    """True when the user belongs to an organization in either schema."""
    if db.query(OrgMember.id).filter(OrgMember.user_id == user_id).first():
        return True
    return db.query(LegacyOrganizationMember.id).filter(LegacyOrganizationMember.user_id == user_id).first() is not None


def slugify(name: str) -> str:
    """URL slug from an organization name.

    Examples:
        >>> slugify("  Acme HQ, Inc. ")
        'acme-hq-inc'
        >>> slugify("Ω")
        'org'
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")[:SLUG_MAX_LENGTH].strip("-")
    if len(slug) < 2:
        slug = f"org-{slug}" if slug else "org"
    return slug


def unique_slug(db: Session, name: str) -> str:
    """slugify(name), suffixed with -2, -3, ... until no organization uses it."""
    base = slugify(name)
    slug = base
    suffix = 2
    while db.query(Org.id).filter(Org.slug == slug).first():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


def set_active_org(db: Session, user_id: UUID, org_id: UUID) -> UserSettings:
    """Upsert user_settings.active_organization_id."""
    settings = db.get(UserSettings, user_id)
    if settings is None:
        settings = UserSettings(user_id=user_id)
        db.add(settings)
    settings.active_organization_id = org_id
    db.flush()
    return settings


def create_organization(db: Session, user: User, name: str) -> Org:
    """Create an organization owned by user and make it their active one.

    Raises:
        OrgError: 400 if the name is too short, 409 if the user already
            belongs to an organization
    """
    name = (name or "").strip()
    if len(name) < 2:
        raise OrgError("Organization name is required.", 400)
    if len(name) > 200:
        raise OrgError("Organization name cannot exceed 200 characters.", 400)

    if has_any_membership(db, user.id):
        raise OrgError("Organization already exists.", 409)

    org = Org(name=name, slug=unique_slug(db, name), created_by=user.id, settings_json={})
    db.add(org)
    db.flush()

    db.add(OrgMember(org_id=org.id, user_id=user.id, role=OrgRole.OWNER.value))
    db.add(LegacyOrganizationMember(organization_id=org.id, user_id=user.id, role=OrgRole.OWNER.value))
    set_active_org(db, user.id, org.id)
    return org


def _parse_org_id(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def resolve_active_org(db: Session, user_id: UUID, cookie_value: Optional[str]) -> Optional[ResolvedOrg]:
    """Find the active organization for a user.

    Order:
    1. the org_id cookie, if the user is still a member of that org
    2. user_settings.active_organization_id, if still a member
    3. the only organization, when the user has exactly one

    Returns:
        ResolvedOrg, or None when the user must pick an organization
    """
    cookie_org = _parse_org_id(cookie_value)
    if cookie_org:
        role = get_org_role(db, cookie_org, user_id)
        if role:
            return ResolvedOrg(org_id=cookie_org, role=role, source="cookie")

    settings = db.get(UserSettings, user_id)
    if settings and settings.active_organization_id:
        role = get_org_role(db, settings.active_organization_id, user_id)
        if role:
            return ResolvedOrg(org_id=settings.active_organization_id, role=role, source="settings")

    memberships = list_memberships(db, user_id)
    if len({m.org_id for m in memberships}) == 1:
        return ResolvedOrg(org_id=memberships[0].org_id, role=memberships[0].role, source="single_membership")

    return None
