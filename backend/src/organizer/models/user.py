"""User SQLAlchemy model"""

import re
import uuid

from sqlalchemy import Column, Text, Uuid
from sqlalchemy.orm import relationship, validates

from .base import Base, UTCDateTime, utcnow


class User(Base):
    """A person who signs in with a magic link or one-time code.

    Users are global; organization access comes from membership rows.
    Accounts are created on first successful login.
    """
    __tablename__ = "app_user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False, unique=True)
    display_name = Column(Text, nullable=True)
    last_login_at = Column(UTCDateTime, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    # Relationships
    memberships = relationship("OrgMember", back_populates="user")
    settings = relationship("UserSettings", back_populates="user", uselist=False)

    @validates('email')
    def validate_email(self, key, value):
        """Basic email format validation"""
        value = (value or "").strip()
        if not re.match(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$', value):
            raise ValueError("Invalid email format")
        return value.lower()

    @property
    def actor_name(self) -> str:
        """Name recorded on change logs and activity events."""
        return self.email

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
