"""LoginToken SQLAlchemy model"""

import uuid

from sqlalchemy import Column, Text, Integer, Uuid, Index

from .base import Base, UTCDateTime, utcnow


class LoginToken(Base):
    """A pending passwordless sign-in.

    One request produces both a link token (SHA-256 hashed, high entropy) and
    a six digit code (argon2 hashed). Either one consumes the token.
    """
    __tablename__ = "login_tokens"
    __table_args__ = (
        Index('ix_login_tokens_email_created_at', 'email', 'created_at'),
        Index('ix_login_tokens_token_hash', 'token_hash', unique=True),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(Text, nullable=False)
    token_hash = Column(Text, nullable=False)
    code_hash = Column(Text, nullable=False)
    redirect_path = Column(Text, nullable=True)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    expires_at = Column(UTCDateTime, nullable=False)
    consumed_at = Column(UTCDateTime, nullable=True)

    def is_usable(self, now) -> bool:
        return self.consumed_at is None and self.expires_at > now
