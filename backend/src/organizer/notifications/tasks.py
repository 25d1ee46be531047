"""Celery tasks for outbound notifications."""

import smtplib

from ..config import get_settings
from ..observability.logging_config import get_logger
from ..workers.celery_app import celery_app
from .mailer import render_login_email, send_email

logger = get_logger(__name__)


@celery_app.task(
    name="notifications.send_login_link",
    bind=True,
    autoretry_for=(smtplib.SMTPException, OSError),
    retry_backoff=True,
    max_retries=3,
)
def send_login_link_task(self, email: str, link: str, code: str) -> None:
    """Email a login link and one-time code.

    SMTP and network failures are retried with exponential backoff.

    Args:
        email: Recipient address
        link: Magic link containing the raw link token
        code: Six digit one-time code
    """
    body = render_login_email(link, code, get_settings().LOGIN_TOKEN_TTL_MINUTES)
    send_email(email, "Your ORGanizer login link", body)
    logger.info("Login link delivered", extra={"task_id": self.request.id})
