"""Passwordless login: issuing, consuming and verifying login tokens."""

from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..config import get_settings
from ..models.base import utcnow
from ..models.login_token import LoginToken
from ..models.user import User
from .otp import generate_code, generate_link_token, hash_code, hash_token, verify_code


class LoginTokenError(Exception):
    """Raised when a login link or code cannot be used."""
    pass


def is_safe_redirect(path: Optional[str]) -> bool:
    """Only same-site relative paths are followed after login.

    Examples:
        >>> is_safe_redirect("/payroll")
        True
        >>> is_safe_redirect("//evil.example.com")
        False
        >>> is_safe_redirect("https://evil.example.com")
        False
    """
    return bool(path) and path.startswith("/") and not path.startswith("//")


def issue_login_token(db: Session, email: str, redirect: Optional[str] = None) -> Tuple[LoginToken, str, str]:
    """Create a login token for an email address.

    Returns:
        Tuple of (row, raw link token, raw six digit code). The raw values are
        only ever handed to the mailer.
    """
    link_token = generate_link_token()
    code = generate_code()

    login_token = LoginToken(
        email=email.strip().lower(),
        token_hash=hash_token(link_token),
        code_hash=hash_code(code),
        redirect_path=redirect if is_safe_redirect(redirect) else None,
        expires_at=utcnow() + timedelta(minutes=get_settings().LOGIN_TOKEN_TTL_MINUTES),
    )
    db.add(login_token)
    db.flush()
    return login_token, link_token, code


def build_login_link(base_url: str, link_token: str) -> str:
    return f"{base_url}/api/v1/auth/callback?code={link_token}"


def consume_link_token(db: Session, link_token: str) -> LoginToken:
    """Consume the login token behind a magic link.

    Raises:
        LoginTokenError: If the token is unknown, expired or already used
    """
    login_token = db.query(LoginToken).filter(LoginToken.token_hash == hash_token(link_token)).first()
    now = utcnow()
    if not login_token or not login_token.is_usable(now):
        raise LoginTokenError("invalid_link")

    login_token.consumed_at = now
    return login_token


def verify_login_code(db: Session, email: str, code: str) -> LoginToken:
    """Check a one-time code against the newest live token for an email.

    A wrong code counts as an attempt; once LOGIN_OTP_MAX_ATTEMPTS is reached
    the token is burned and a new login link must be requested.

    Raises:
        LoginTokenError: If there is no live token or the code is wrong
    """
    now = utcnow()
    login_token = (
        db.query(LoginToken)
        .filter(
            LoginToken.email == email.strip().lower(),
            LoginToken.consumed_at.is_(None),
            LoginToken.expires_at > now,
        )
        .order_by(LoginToken.created_at.desc())
        .first()
    )
    if not login_token:
        raise LoginTokenError("no_active_code")

    if not verify_code(code.strip(), login_token.code_hash):
        login_token.attempts += 1
        if login_token.attempts >= get_settings().LOGIN_OTP_MAX_ATTEMPTS:
            login_token.consumed_at = now
        raise LoginTokenError("invalid_code")

    login_token.consumed_at = now
    return login_token


def get_or_create_user(db: Session, email: str) -> User:
    """Find the user for an email, creating the account on first login.

    last_login_at is refreshed either way.
    """
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email)
        db.add(user)

    user.last_login_at = utcnow()
    db.flush()
    return user
