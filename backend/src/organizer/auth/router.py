"""Authentication endpoints for the ORGanizer API

Passwordless login: a login request emails a magic link and a six digit
code. Either one signs the user in; the first successful login creates the
account.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..links import get_base_url
from ..observability.logging_config import get_logger
from ..observability.metrics import login_links_sent_total, logins_total
from ..notifications.tasks import send_login_link_task
from .cookies import clear_auth_cookies, set_session_cookie
from .dependencies import CurrentUser
from .jwt import create_access_token, get_jwt_expiry_minutes
from .rate_limit import check_email_rate_limit, check_rate_limit
from .schemas import (
    LoginLinkRequest,
    LoginLinkResponse,
    LoginResponse,
    MeResponse,
    UserResponse,
    VerifyCodeRequest,
)
from .service import (
    LoginTokenError,
    build_login_link,
    consume_link_token,
    get_or_create_user,
    issue_login_token,
    verify_login_code,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login-link", response_model=LoginLinkResponse, status_code=status.HTTP_202_ACCEPTED)
def request_login_link(
    body: LoginLinkRequest,
    request: Request,
    db: Session = Depends(get_db),
    _: None = Depends(check_rate_limit),
) -> LoginLinkResponse:
    """Email a magic link and a one-time code.

    The response is identical whether or not the address has an account, so
    the endpoint cannot be used to enumerate users.

    Security measures:
    - Per-client and per-address rate limiting
    - Only hashes of the link token and code are stored
    - Redirect targets are restricted to relative paths

    Raises:
        HTTPException 429: If a rate limit is exceeded
    """
    email = str(body.email).lower()
    check_email_rate_limit(email, "login-link")

    login_token, link_token, code = issue_login_token(db, email, body.redirect)
    db.commit()

    base_url = get_base_url(request) or str(request.base_url).rstrip("/")
    send_login_link_task.delay(email, build_login_link(base_url, link_token), code)

    login_links_sent_total.inc()
    logger.info("Login link issued", extra={"login_token_id": str(login_token.id)})
    return LoginLinkResponse()


@router.get("/callback")
def login_callback(code: Optional[str] = None, db: Session = Depends(get_db)) -> RedirectResponse:
    """Complete a magic-link login.

    Redirects (303) to /login without a code, to /login?error=invalid_link when
    the link is unknown, expired or used, otherwise to the stored redirect or
    /dashboard with the session cookie set.
    """
    if not code:
        return RedirectResponse("/login", status_code=status.HTTP_303_SEE_OTHER)

    try:
        login_token = consume_link_token(db, code)
    except LoginTokenError:
        logins_total.labels(method="link", status="failed").inc()
        logger.info("Login link rejected")
        return RedirectResponse("/login?error=invalid_link", status_code=status.HTTP_303_SEE_OTHER)

    user = get_or_create_user(db, login_token.email)
    db.commit()

    logins_total.labels(method="link", status="success").inc()
    logger.info("User logged in", extra={"user_id": str(user.id), "method": "link"})

    response = RedirectResponse(login_token.redirect_path or "/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, create_access_token(user.id, user.email))
    return response


@router.post("/verify-otp", response_model=LoginResponse)
def verify_otp(
    body: VerifyCodeRequest,
    response: Response,
    db: Session = Depends(get_db),
    _: None = Depends(check_rate_limit),
) -> LoginResponse:
    """Sign in with the one-time code from the login email.

    Raises:
        HTTPException 401: If there is no live code or the code is wrong
    """
    try:
        login_token = verify_login_code(db, str(body.email), body.code)
    except LoginTokenError:
        # Persist the attempt counter before rejecting
        db.commit()
        logins_total.labels(method="otp", status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired code.",
        )

    user = get_or_create_user(db, login_token.email)
    db.commit()

    logins_total.labels(method="otp", status="success").inc()
    logger.info("User logged in", extra={"user_id": str(user.id), "method": "otp"})

    access_token = create_access_token(user.id, user.email)
    set_session_cookie(response, access_token)
    return LoginResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=get_jwt_expiry_minutes() * 60,
    )


@router.get("/me", response_model=MeResponse)
def get_me(current_user: CurrentUser) -> MeResponse:
    """Get current authenticated user information."""
    return MeResponse(user=UserResponse.model_validate(current_user))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(response: Response) -> None:
    """Clear the session and active-organization cookies.

    Session tokens are stateless; a copied token stays valid until it expires.
    """
    clear_auth_cookies(response)
