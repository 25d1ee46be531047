"""Organization and membership models - root entities for multi-tenant isolation"""

import re
import uuid

from sqlalchemy import Column, Text, Uuid, ForeignKey, CheckConstraint, UniqueConstraint, Index
from sqlalchemy.orm import validates, relationship

from .base import Base, PortableJSONB, UTCDateTime, utcnow


class Org(Base):
    """
    Organization model - Root entity for multi-tenant system.

    Each organization represents a distinct tenant with isolated data.
    Tenant-scoped tables reference org.id via foreign key.
    """
    __tablename__ = "org"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(Text, nullable=False)
    slug = Column(Text, nullable=False, unique=True)
    created_by = Column(Uuid, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True)
    settings_json = Column(PortableJSONB, nullable=False, default=dict)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    members = relationship("OrgMember", back_populates="org", cascade="all, delete-orphan")

    @validates('slug')
    def validate_slug(self, key, value):
        """
        Ensure slug is URL-friendly and follows naming conventions.

        Pattern: ^[a-z0-9-]+$
        Valid: acme-hq, test-org-123
        Invalid: Acme_HQ, acme hq, acme.hq

        Raises:
            ValueError: If slug doesn't match pattern or length requirements
        """
        if not re.match(r'^[a-z0-9-]+$', value):
            raise ValueError(
                "Slug must contain only lowercase letters, numbers, and hyphens"
            )
        if len(value) < 2 or len(value) > 100:
            raise ValueError("Slug must be between 2 and 100 characters")
        return value

    @validates('name')
    def validate_name(self, key, value):
        """
        Ensure organization name is not empty and within length limits.

        Raises:
            ValueError: If name is shorter than 2 characters or exceeds 200 characters
        """
        value = (value or "").strip()
        if len(value) < 2:
            raise ValueError("Organization name is required.")
        if len(value) > 200:
            raise ValueError("Organization name cannot exceed 200 characters")
        return value

    def __repr__(self):
        return f"<Org(id={self.id}, slug='{self.slug}', name='{self.name}')>"


class OrgMember(Base):
    """Membership row in the current schema (org_members)."""
    __tablename__ = "org_members"
    __table_args__ = (
        UniqueConstraint('org_id', 'user_id', name='uq_org_members_org_user'),
        CheckConstraint("role IN ('owner', 'admin', 'member')", name='ck_org_members_role'),
        Index('ix_org_members_user_id', 'user_id'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    role = Column(Text, nullable=False, default="member")
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    org = relationship("Org", back_populates="members")
    user = relationship("User", back_populates="memberships")


class LegacyOrganizationMember(Base):
    """Membership row in the legacy schema (organization_members).

    Older organizations only have rows here. Roles are free text; anything
    other than owner/admin ranks as member.
    """
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint('organization_id', 'user_id', name='uq_organization_members_org_user'),
        Index('ix_organization_members_user_id', 'user_id'),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id = Column(Uuid, ForeignKey("org.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    role = Column(Text, nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)


class UserSettings(Base):
    """Per-user preferences; remembers the active organization across sessions."""
    __tablename__ = "user_settings"

    user_id = Column(Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True)
    active_organization_id = Column(Uuid, ForeignKey("org.id", ondelete="SET NULL"), nullable=True)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    user = relationship("User", back_populates="settings")
