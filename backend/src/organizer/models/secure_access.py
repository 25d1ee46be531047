"""Secure access SQLAlchemy models: vendor credentials and their activity log"""

import uuid

from sqlalchemy import Column, ForeignKey, Index, Text, Uuid

from .base import Base, PortableJSONB, UTCDateTime, utcnow


def new_vendor_id() -> str:
    return f"v-{uuid.uuid4()}"


class Vendor(Base):
    """A third-party credential record.

    The password is never stored in clear text; password_encrypted holds the
    serialized AES-GCM envelope produced by secure_access.vault.
    """
    __tablename__ = "secure_access_vendors"
    __table_args__ = (
        Index("ix_secure_access_vendors_org_id_created_at", "org_id", "created_at"),
    )

    id = Column(Text, primary_key=True, default=new_vendor_id)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    name = Column(Text, nullable=False, default="")
    website = Column(Text, nullable=False, default="")
    password_encrypted = Column(Text, nullable=True)
    account_number = Column(Text, nullable=False, default="")
    contact_phone = Column(Text, nullable=False, default="")
    contact_email = Column(Text, nullable=False, default="")
    last_updated_at = Column(UTCDateTime, nullable=False, default=utcnow)
    last_updated_by = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)


class VendorActivity(Base):
    """Append-only activity event for a vendor.

    vendor_id is not a foreign key so the "Vendor deleted" event outlives
    the vendor row.
    """
    __tablename__ = "secure_access_activity"
    __table_args__ = (
        Index("ix_secure_access_activity_org_vendor_created", "org_id", "vendor_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    vendor_id = Column(Text, nullable=False)
    action = Column(Text, nullable=False)
    actor_name = Column(Text, nullable=False, default="")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    fields_changed = Column(PortableJSONB, nullable=False, default=list)
    note = Column(Text, nullable=True)
