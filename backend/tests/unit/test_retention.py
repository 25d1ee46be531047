"""Unit tests for retention cleanup

Tests cover:
- Login tokens consumed or expired more than a day ago are deleted
- Invites revoked, or expired unaccepted, past the retention window are deleted
- Live and accepted records are kept
- Idempotency and the Celery task wrapper
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from organizer.config import get_settings
from organizer.models import LoginToken, OrgInvite
from organizer.models.base import utcnow
from organizer.retention.service import run_retention_cleanup
from organizer.retention.tasks import retention_cleanup_task
from organizer.workers.celery_app import celery_app  # noqa: F401


def _login_token(db: Session, suffix: str, expires_delta: timedelta, consumed_delta=None) -> LoginToken:
    now = utcnow()
    token = LoginToken(
        email="owner@example.com",
        token_hash=f"hash-{suffix}",
        code_hash="code-hash",
        expires_at=now + expires_delta,
        consumed_at=now + consumed_delta if consumed_delta is not None else None,
    )
    db.add(token)
    return token


def _invite(db: Session, org, suffix: str, expires_delta: timedelta, **extra) -> OrgInvite:
    invite = OrgInvite(
        org_id=org.id,
        email=f"{suffix}@example.com",
        role="member",
        token_hash=f"invite-{suffix}",
        expires_at=utcnow() + expires_delta,
        **extra,
    )
    db.add(invite)
    return invite


class TestLoginTokenRetention:

    def test_dead_tokens_deleted_live_tokens_kept(self, db_session: Session):
        _login_token(db_session, "live", timedelta(minutes=30))
        _login_token(db_session, "recently-expired", timedelta(hours=-2))
        _login_token(db_session, "long-expired", timedelta(days=-3))
        _login_token(db_session, "consumed-long-ago", timedelta(days=5), consumed_delta=timedelta(days=-2))
        db_session.commit()

        stats = run_retention_cleanup(db_session)

        assert stats.login_tokens_deleted == 2
        remaining = {t.token_hash for t in db_session.query(LoginToken).all()}
        assert remaining == {"hash-live", "hash-recently-expired"}


class TestInviteRetention:

    def test_old_dead_invites_deleted(self, db_session: Session, test_org):
        window = timedelta(days=get_settings().INVITE_RETENTION_DAYS + 1)
        _invite(db_session, test_org, "pending", timedelta(days=7))
        _invite(db_session, test_org, "old-expired", -window)
        _invite(db_session, test_org, "old-revoked", timedelta(days=7), revoked_at=utcnow() - window)
        _invite(db_session, test_org, "recently-revoked", timedelta(days=7), revoked_at=utcnow())
        _invite(db_session, test_org, "accepted", -window, accepted_at=utcnow() - window)
        db_session.commit()

        stats = run_retention_cleanup(db_session)

        assert stats.invites_deleted == 2
        remaining = {i.email for i in db_session.query(OrgInvite).all()}
        assert remaining == {
            "pending@example.com",
            "recently-revoked@example.com",
            "accepted@example.com",
        }

    def test_cleanup_is_idempotent(self, db_session: Session, test_org):
        _invite(db_session, test_org, "old-expired", -timedelta(days=get_settings().INVITE_RETENTION_DAYS + 1))
        db_session.commit()

        first = run_retention_cleanup(db_session)
        second = run_retention_cleanup(db_session)

        assert first.total_records_deleted == 1
        assert second.total_records_deleted == 0
        assert second.duration_seconds >= 0


class TestRetentionTask:

    def test_task_returns_statistics(self, db_session: Session):
        _login_token(db_session, "long-expired", timedelta(days=-3))
        db_session.commit()

        result = retention_cleanup_task.apply().get()

        assert result["status"] == "completed"
        assert result["login_tokens_deleted"] == 1
        assert result["total_deleted"] == 1

    def test_beat_schedule_runs_daily(self):
        entry = celery_app.conf.beat_schedule["retention-cleanup-daily"]
        assert entry["task"] == "retention.cleanup"
