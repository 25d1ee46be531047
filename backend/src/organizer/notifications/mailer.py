"""Outbound email.

MAIL_BACKEND selects the transport:
- smtp: deliver through SMTP_HOST/SMTP_PORT (STARTTLS when enabled)
- console: write the message to the log (development)
- memory: append to ``outbox`` (tests)
"""

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import List

from ..config import get_settings
from ..observability.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    body: str


# Messages captured by the memory backend
outbox: List[OutgoingEmail] = []


def _send_smtp(message: OutgoingEmail) -> None:
    settings = get_settings()

    msg = EmailMessage()
    msg["Subject"] = message.subject
    msg["From"] = settings.MAIL_FROM
    msg["To"] = message.to
    msg.set_content(message.body)

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as server:
        if settings.SMTP_STARTTLS:
            server.starttls()
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
        server.send_message(msg)


def send_email(to: str, subject: str, body: str) -> None:
    """Send an email through the configured backend.

    Raises:
        ValueError: If MAIL_BACKEND is not recognised
        smtplib.SMTPException: If SMTP delivery fails
    """
    backend = get_settings().MAIL_BACKEND
    message = OutgoingEmail(to=to, subject=subject, body=body)

    if backend == "smtp":
        _send_smtp(message)
    elif backend == "console":
        logger.info(f"Email to {to}: {subject}\n{body}")
    elif backend == "memory":
        outbox.append(message)
    else:
        raise ValueError(f"Unknown MAIL_BACKEND: {backend}")

    logger.info("Email sent", extra={"mail_backend": backend, "subject": subject})


def render_login_email(link: str, code: str, ttl_minutes: int) -> str:
    return (
        "Sign in to ORGanizer\n\n"
        f"Open this link to sign in:\n{link}\n\n"
        f"Or enter this code on the login page: {code}\n\n"
        f"The link and code expire in {ttl_minutes} minutes. "
        "If you did not request this email you can ignore it.\n"
    )
