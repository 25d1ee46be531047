"""Secure access notes: vendor credentials and their activity log.

Every read of a clear-text password (reveal, copy) and every write is
recorded in secure_access_activity.
"""

import re
from typing import List, Optional
from urllib.parse import urlsplit
from uuid import UUID

from sqlalchemy.orm import Session

from ..models.base import utcnow
from ..models.secure_access import Vendor, VendorActivity
from .schemas import VendorCreate, VendorUpdate
from .vault import get_vault

# Update labels, in display order: (field, label, trimmed)
VENDOR_FIELD_LABELS = [
    ("name", "Vendor Name", True),
    ("website", "Website", True),
    ("account_number", "Account Number", True),
    ("contact_phone", "Contact Phone", True),
    ("contact_email", "Contact Email", True),
    ("password", "Password updated", False),
]

ACTION_CREATED = "Vendor created"
ACTION_UPDATED = "Vendor updated"
ACTION_DELETED = "Vendor deleted"
ACTION_REVEALED = "Password revealed"
ACTION_COPIED = "Password copied"

MISSING_FIELDS_MESSAGE = "Please fill out all required fields."


class VendorNotFoundError(Exception):
    pass


class VendorValidationError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def website_domain(website: str) -> str:
    """Host part of a website for display.

    Examples:
        >>> website_domain("https://northwindfacilities.com/login")
        'northwindfacilities.com'
        >>> website_domain("cedarhr.com")
        'cedarhr.com'
    """
    parts = urlsplit(website or "")
    if parts.scheme and parts.netloc:
        return parts.netloc.rsplit("@", 1)[-1].lower()
    return re.sub(r"^https?://", "", website or "")


def mask_password(password: str) -> str:
    return "•" * max(len(password), 6)


def read_password(vendor: Vendor) -> str:
    if not vendor.password_encrypted:
        return ""
    return get_vault().decrypt(vendor.password_encrypted, vendor.org_id)


def _store_password(vendor: Vendor, password: str) -> None:
    vendor.password_encrypted = get_vault().encrypt(password, vendor.org_id) if password else None


def log_vendor_event(
    db: Session,
    org_id: UUID,
    vendor_id: str,
    action: str,
    actor_name: str,
    fields_changed: Optional[List[str]] = None,
    note: Optional[str] = None,
) -> VendorActivity:
    event = VendorActivity(
        org_id=org_id,
        vendor_id=vendor_id,
        action=action,
        actor_name=actor_name,
        fields_changed=fields_changed or [],
        note=note,
    )
    db.add(event)
    db.flush()
    return event


def list_vendors(db: Session, org_id: UUID) -> List[Vendor]:
    return (
        db.query(Vendor)
        .filter(Vendor.org_id == org_id)
        .order_by(Vendor.created_at.desc())
        .all()
    )


def get_vendor(db: Session, org_id: UUID, vendor_id: str) -> Vendor:
    """Load a vendor of the organization.

    Raises:
        VendorNotFoundError: If the vendor is unknown or belongs to another org
    """
    vendor = db.query(Vendor).filter(Vendor.id == vendor_id, Vendor.org_id == org_id).first()
    if not vendor:
        raise VendorNotFoundError(vendor_id)
    return vendor


def create_vendor(db: Session, org_id: UUID, data: VendorCreate, actor_name: str) -> Vendor:
    """Create a vendor and log "Vendor created".

    All six fields are trimmed, the password included, and none may be empty.

    Raises:
        VendorValidationError: If any field is empty after trimming
    """
    fields = {field: getattr(data, field).strip() for field, _, _ in VENDOR_FIELD_LABELS}
    if not all(fields.values()):
        raise VendorValidationError(MISSING_FIELDS_MESSAGE)

    now = utcnow()
    vendor = Vendor(
        org_id=org_id,
        name=fields["name"],
        website=fields["website"],
        account_number=fields["account_number"],
        contact_phone=fields["contact_phone"],
        contact_email=fields["contact_email"],
        last_updated_at=now,
        last_updated_by=actor_name,
        created_at=now,
    )
    _store_password(vendor, fields["password"])
    db.add(vendor)
    db.flush()

    log_vendor_event(db, org_id, vendor.id, ACTION_CREATED, actor_name)
    return vendor


def update_vendor(db: Session, org_id: UUID, vendor_id: str, patch: VendorUpdate, actor_name: str) -> List[str]:
    """Apply the fields that differ and log "Vendor updated".

    Text fields are trimmed before comparison; the password is compared
    verbatim. When nothing differs nothing is written or logged.

    Returns:
        Labels of the changed fields
    """
    vendor = get_vendor(db, org_id, vendor_id)
    changes: List[str] = []

    for field, label, trimmed in VENDOR_FIELD_LABELS:
        value = getattr(patch, field)
        if value is None:
            continue
        if trimmed:
            value = value.strip()

        if field == "password":
            if value != read_password(vendor):
                _store_password(vendor, value)
                changes.append(label)
        elif value != getattr(vendor, field):
            if field == "name" and not value:
                raise VendorValidationError("Vendor name is required.")
            setattr(vendor, field, value)
            changes.append(label)

    if not changes:
        return changes

    vendor.last_updated_at = utcnow()
    vendor.last_updated_by = actor_name
    log_vendor_event(db, org_id, vendor.id, ACTION_UPDATED, actor_name, fields_changed=changes)
    return changes


def delete_vendor(db: Session, org_id: UUID, vendor_id: str, actor_name: str) -> None:
    """Log "Vendor deleted" and delete the vendor; its activity is kept."""
    vendor = get_vendor(db, org_id, vendor_id)
    log_vendor_event(db, org_id, vendor.id, ACTION_DELETED, actor_name)
    db.delete(vendor)
    db.flush()


def disclose_password(db: Session, org_id: UUID, vendor_id: str, actor_name: str, action: str) -> str:
    """Return the clear-text password and record who saw it.

    Args:
        action: ACTION_REVEALED or ACTION_COPIED
    """
    vendor = get_vendor(db, org_id, vendor_id)
    password = read_password(vendor)
    log_vendor_event(db, org_id, vendor.id, action, actor_name)
    return password


def list_activity(db: Session, org_id: UUID, vendor_id: str) -> List[VendorActivity]:
    """Activity of a vendor, newest first.

    Events of a deleted vendor stay readable.

    Raises:
        VendorNotFoundError: If the org has neither the vendor nor any events for it
    """
    events = (
        db.query(VendorActivity)
        .filter(VendorActivity.org_id == org_id, VendorActivity.vendor_id == vendor_id)
        .order_by(VendorActivity.created_at.desc())
        .all()
    )
    if not events:
        get_vendor(db, org_id, vendor_id)
    return events
