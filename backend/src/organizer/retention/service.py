"""Retention cleanup for short-lived authentication and invite records.

Deletes:
- login tokens consumed or expired more than a day ago
- invites revoked, or expired without being accepted, more than
  INVITE_RETENTION_DAYS ago

Accepted invites are kept; they record who joined an organization and when.
All operations are idempotent and can be safely retried.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.base import utcnow
from ..models.invite import OrgInvite
from ..models.login_token import LoginToken
from ..observability.logging_config import get_logger

logger = get_logger(__name__)

LOGIN_TOKEN_GRACE = timedelta(days=1)


@dataclass
class RetentionStatistics:
    job_started_at: datetime
    job_completed_at: Optional[datetime] = None
    login_tokens_deleted: int = 0
    invites_deleted: int = 0

    @property
    def total_records_deleted(self) -> int:
        return self.login_tokens_deleted + self.invites_deleted

    @property
    def duration_seconds(self) -> float:
        if not self.job_completed_at:
            return 0.0
        return (self.job_completed_at - self.job_started_at).total_seconds()


def purge_login_tokens(db: Session, now: datetime) -> int:
    cutoff = now - LOGIN_TOKEN_GRACE
    return (
        db.query(LoginToken)
        .filter(or_(LoginToken.consumed_at < cutoff, LoginToken.expires_at < cutoff))
        .delete(synchronize_session=False)
    )


def purge_invites(db: Session, now: datetime, retention_days: int) -> int:
    cutoff = now - timedelta(days=retention_days)
    return (
        db.query(OrgInvite)
        .filter(
            or_(
                OrgInvite.revoked_at < cutoff,
                and_(OrgInvite.accepted_at.is_(None), OrgInvite.expires_at < cutoff),
            )
        )
        .delete(synchronize_session=False)
    )


def run_retention_cleanup(db: Session, now: Optional[datetime] = None) -> RetentionStatistics:
    """Delete expired records and commit.

    Args:
        db: Database session
        now: Reference time (defaults to the current UTC time)

    Returns:
        RetentionStatistics: Counts of deleted rows
    """
    now = now or utcnow()
    stats = RetentionStatistics(job_started_at=utcnow())

    stats.login_tokens_deleted = purge_login_tokens(db, now)
    stats.invites_deleted = purge_invites(db, now, get_settings().INVITE_RETENTION_DAYS)
    db.commit()

    stats.job_completed_at = utcnow()
    logger.info(
        "Retention cleanup finished",
        extra={
            "login_tokens_deleted": stats.login_tokens_deleted,
            "invites_deleted": stats.invites_deleted,
            "duration_seconds": stats.duration_seconds,
        },
    )
    return stats
