"""AuditLog SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, Uuid, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import Base, PortableJSONB, UTCDateTime, utcnow


class AuditLog(Base):
    """AuditLog model for immutable security event logging.

    Records security-relevant organization events (org creation, invites,
    ownership transfer). Entries are append-only and should never be updated
    or deleted.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        Index("ix_audit_log_org_id", "org_id"),
        Index("ix_audit_log_org_id_created_at", "org_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    actor_id = Column(Uuid, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    action = Column(Text, nullable=False)
    entity_type = Column(Text, nullable=True)
    entity_id = Column(Text, nullable=True)
    metadata_json = Column(PortableJSONB, nullable=True)
    ip_address = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # Relationships
    org = relationship("Org")
    actor = relationship("User")
