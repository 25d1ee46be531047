"""SQLAlchemy Models for ORGanizer"""

from .base import Base
from .user import User
from .org import Org, OrgMember, LegacyOrganizationMember, UserSettings
from .invite import OrgInvite
from .login_token import LoginToken
from .audit_log import AuditLog
from .payroll import Employee, PayrollProfileRecord, PayrollChangeLog
from .secure_access import Vendor, VendorActivity

__all__ = [
    "Base",
    "User",
    "Org",
    "OrgMember",
    "LegacyOrganizationMember",
    "UserSettings",
    "OrgInvite",
    "LoginToken",
    "AuditLog",
    "Employee",
    "PayrollProfileRecord",
    "PayrollChangeLog",
    "Vendor",
    "VendorActivity",
]
