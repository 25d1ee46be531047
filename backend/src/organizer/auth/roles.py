"""Organization roles and permission hierarchy for ORGanizer.

Role Hierarchy (descending permissions):
- owner: everything an admin can do, plus transferring ownership
- admin: invite and list members, revoke invites, read the audit log
- member: payroll, secure access notes, dashboard

Permission Matrix:
┌──────────────────────────┬───────┬───────┬────────┐
│ Action                   │ owner │ admin │ member │
├──────────────────────────┼───────┼───────┼────────┤
│ Transfer ownership       │   ✓   │       │        │
│ Invite / revoke invites  │   ✓   │   ✓   │        │
│ List members             │   ✓   │   ✓   │        │
│ View audit log           │   ✓   │   ✓   │        │
│ Payroll                  │   ✓   │   ✓   │   ✓    │
│ Secure access notes      │   ✓   │   ✓   │   ✓    │
└──────────────────────────┴───────┴───────┴────────┘

Legacy membership rows may carry other role names (e.g. "staff");
those rank as member.
"""

from enum import Enum
from typing import Optional


class OrgRole(str, Enum):
    """Roles within an organization.

    Values are stored as TEXT in the database and must match exactly.
    """
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


ROLE_RANK = {
    OrgRole.OWNER: 3,
    OrgRole.ADMIN: 2,
    OrgRole.MEMBER: 1,
}

# Roles an invite may grant
INVITABLE_ROLES = {OrgRole.ADMIN.value, OrgRole.MEMBER.value}


def normalize_role(role: Optional[str]) -> Optional[OrgRole]:
    """Map a stored role string (current or legacy schema) to an OrgRole.

    Examples:
        >>> normalize_role("admin")
        <OrgRole.ADMIN: 'admin'>
        >>> normalize_role("staff")
        <OrgRole.MEMBER: 'member'>
        >>> normalize_role(None) is None
        True
    """
    if not role:
        return None
    try:
        return OrgRole(role.lower())
    except ValueError:
        return OrgRole.MEMBER


def has_permission(user_role: Optional[str], required_role: OrgRole) -> bool:
    """Check if a role satisfies the minimum required role.

    Examples:
        >>> has_permission("owner", OrgRole.ADMIN)
        True
        >>> has_permission("member", OrgRole.ADMIN)
        False
        >>> has_permission(None, OrgRole.MEMBER)
        False
    """
    role = normalize_role(user_role)
    if role is None:
        return False
    return ROLE_RANK[role] >= ROLE_RANK[required_role]


def higher_role(first: str, second: str) -> str:
    """Return whichever of two roles ranks higher (first wins ties)."""
    if ROLE_RANK[normalize_role(second)] > ROLE_RANK[normalize_role(first)]:
        return second
    return first
