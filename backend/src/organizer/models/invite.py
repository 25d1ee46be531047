"""OrgInvite SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, Uuid, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship

from .base import Base, UTCDateTime, utcnow


class OrgInvite(Base):
    """Tokenized, time-limited, single-use grant of a role in an organization.

    Only the SHA-256 hash of the invite token is stored; the raw token lives
    in the invite link handed to the inviter.
    """
    __tablename__ = "org_invites"
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'member')", name='ck_org_invites_role'),
        Index('ix_org_invites_org_id_created_at', 'org_id', 'created_at'),
        Index('ix_org_invites_token_hash', 'token_hash', unique=True),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    email = Column(Text, nullable=False)
    role = Column(Text, nullable=False)
    token_hash = Column(Text, nullable=False)
    invited_by = Column(Uuid, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    expires_at = Column(UTCDateTime, nullable=False)
    accepted_at = Column(UTCDateTime, nullable=True)
    accepted_by = Column(Uuid, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    revoked_at = Column(UTCDateTime, nullable=True)

    org = relationship("Org")

    @property
    def is_pending(self) -> bool:
        return self.accepted_at is None and self.revoked_at is None

    def expired_by(self, now) -> bool:
        return self.expires_at <= now

    def __repr__(self):
        return f"<OrgInvite(id={self.id}, org_id={self.org_id}, email='{self.email}', role='{self.role}')>"
