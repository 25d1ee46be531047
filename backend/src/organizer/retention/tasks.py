"""Celery tasks for data retention cleanup.

Tasks:
- retention_cleanup_task: Daily job running at 02:00 UTC (see workers.celery_app)
"""

from typing import Any, Dict

from ..database import SessionLocal
from ..observability.logging_config import get_logger
from ..workers.celery_app import celery_app
from .service import run_retention_cleanup

logger = get_logger(__name__)


@celery_app.task(name="retention.cleanup", bind=True)
def retention_cleanup_task(self) -> Dict[str, Any]:
    """Purge dead login tokens and invites.

    The task is idempotent; a second run in succession deletes nothing.

    Returns:
        Dict with cleanup statistics for the Celery result backend
    """
    logger.info("Retention cleanup task started")

    db = SessionLocal()
    try:
        stats = run_retention_cleanup(db)
    except Exception:
        db.rollback()
        logger.error("Retention cleanup task failed", exc_info=True)
        raise
    finally:
        db.close()

    return {
        "status": "completed",
        "job_started_at": stats.job_started_at.isoformat(),
        "job_completed_at": stats.job_completed_at.isoformat(),
        "duration_seconds": stats.duration_seconds,
        "login_tokens_deleted": stats.login_tokens_deleted,
        "invites_deleted": stats.invites_deleted,
        "total_deleted": stats.total_records_deleted,
    }
