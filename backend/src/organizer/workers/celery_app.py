"""Celery configuration for ORGanizer.

Background work:
- notifications.send_login_link: deliver login links off the request path
- retention.cleanup: purge dead login tokens and invites (daily, 02:00 UTC)

Run a worker and the scheduler with:
    celery -A organizer.workers.celery_app worker --loglevel=info
    celery -A organizer.workers.celery_app beat --loglevel=info
"""

from celery import Celery
from celery.schedules import crontab

from ..config import get_settings

settings = get_settings()

celery_app = Celery(
    "organizer",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "organizer.notifications.tasks",
        "organizer.retention.tasks",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
    task_eager_propagates=True,
)

celery_app.conf.beat_schedule = {
    "retention-cleanup-daily": {
        "task": "retention.cleanup",
        "schedule": crontab(hour=2, minute=0),
        "options": {"expires": 3600},
    },
}
