"""
Authentication endpoints.

- Email/Password signup & login
- Google OAuth login (authorization URL + code callback)
- Password reset by emailed single-use token
- JWT session management (refresh, logout, current user)

Every successful authentication resolves the caller's pending invitations
before the session is issued.
"""

from __future__ import annotations

import secrets

import jwt
import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    create_session_token,
    decode_session_token,
    generate_csrf_token,
    get_current_user,
    resolve_session_identity,
    revoke_session,
)
from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import Unauthenticated
from app.core.oauth import build_authorization_url, exchange_code
from app.models.user import User
from app.services import memberships as membership_service
from app.services import password_reset as password_reset_service
from app.services import users as user_service
from app.services.invitations import resolve_pending_invitations
from hotel_crm_shared.schemas.common import GlobalRole
from hotel_crm_shared.schemas.users import (
    CurrentUserResponse,
    LoginRequest,
    PasswordResetConfirm,
    PasswordResetRequest,
    SignupRequest,
    UserResponse,
)

log = structlog.get_logger()
settings = get_settings()
router = APIRouter()

OAUTH_STATE_COOKIE = "crm_oauth_state"

# Cookie config
COOKIE_KWARGS = {
    "httponly": True,
    "secure": not settings.debug,  # allow non-HTTPS in dev
    "samesite": "lax",
    "path": "/",
    "max_age": settings.session_expire_minutes * 60,
}


def _set_session_cookies(response: Response, token: str, csrf: str) -> None:
    """Set the session JWT and CSRF cookies on a response."""
    response.set_cookie(key=SESSION_COOKIE, value=token, **COOKIE_KWARGS)
    response.set_cookie(
        key=CSRF_COOKIE,
        value=csrf,
        httponly=False,  # JS must read this
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=settings.session_expire_minutes * 60,
    )


async def _start_session(user: User, response: Response, session: AsyncSession) -> None:
    await resolve_pending_invitations(user.email, user, session)
    token, _jti = create_session_token(user.id)
    _set_session_cookies(response, token, generate_csrf_token())


# ---------------------------------------------------------------------------
# Email/Password
# ---------------------------------------------------------------------------

@router.post("/signup", response_model=UserResponse, status_code=201)
async def signup(
    body: SignupRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Create an account and sign in. Pending invitations become memberships."""
    user = await user_service.signup(body, session)
    await _start_session(user, response, session)
    log.info("auth.signup_success", user_id=str(user.id))
    return user


@router.post("/login", response_model=UserResponse)
async def login(
    body: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a session cookie."""
    user = await user_service.authenticate(body.email, body.password, session)
    await _start_session(user, response, session)
    log.info("auth.login_success", user_id=str(user.id))
    return user


@router.post("/forgot-password")
async def forgot_password(
    body: PasswordResetRequest,
    session: AsyncSession = Depends(get_session),
):
    """Email a reset link. The answer is the same whether or not the account exists."""
    await password_reset_service.request_password_reset(body.email, session)
    return {"message": "If an account exists for this email, a reset link has been sent"}


@router.post("/reset-password")
async def reset_password(
    body: PasswordResetConfirm,
    session: AsyncSession = Depends(get_session),
):
    """Set a new password with a token from a reset email."""
    user = await password_reset_service.reset_password(body.token, body.password, session)
    log.info("auth.password_reset", user_id=str(user.id))
    return {"message": "Password has been reset. You can now sign in."}


# ---------------------------------------------------------------------------
# Google OAuth
# ---------------------------------------------------------------------------

@router.get("/google")
async def google_login(response: Response):
    """Return the Google authorization URL; the state is pinned in a cookie."""
    state = secrets.token_urlsafe(24)
    url = build_authorization_url(state)
    response.set_cookie(
        key=OAUTH_STATE_COOKIE,
        value=state,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=600,
    )
    return {"authorization_url": url}


@router.get("/google/callback")
async def google_callback(
    code: str,
    state: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
):
    """Finish Google sign-in, then redirect to the app with a session."""
    expected = request.cookies.get(OAUTH_STATE_COOKIE)
    if not expected or not secrets.compare_digest(expected, state):
        raise Unauthenticated("OAuth state mismatch")

    profile = await exchange_code(code)
    user = await user_service.login_with_google(profile, session)

    redirect = RedirectResponse(url=settings.post_login_redirect, status_code=302)
    await _start_session(user, redirect, session)
    redirect.delete_cookie(OAUTH_STATE_COOKIE, path="/")

    log.info("auth.login_success", user_id=str(user.id), provider="google")
    return redirect


# ---------------------------------------------------------------------------
# Session Management
# ---------------------------------------------------------------------------

@router.get("/user", response_model=CurrentUserResponse)
async def current_user(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """The signed-in user, and whether onboarding can be skipped."""
    if user.role == GlobalRole.SUPER_ADMIN.value:
        has_membership = True
    else:
        has_membership = await membership_service.has_active_membership(user.id, session)

    result = CurrentUserResponse.model_validate(user)
    result.has_organization_membership = has_membership
    return result


@router.post("/refresh")
async def refresh_session(request: Request, response: Response):
    """Issue a new session token and revoke the old one."""
    user_id = await resolve_session_identity(request)
    old_jti = decode_session_token(request.cookies[SESSION_COOKIE]).get("jti")

    token, _jti = create_session_token(user_id)
    if old_jti:
        await revoke_session(old_jti)

    _set_session_cookies(response, token, generate_csrf_token())
    return {"message": "Session refreshed"}


@router.post("/logout")
async def logout(request: Request, response: Response):
    """Invalidate the current session."""
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            jti = decode_session_token(token).get("jti")
        except jwt.PyJWTError:
            log.info("auth.logout_invalid_token")
            jti = None
        if jti:
            await revoke_session(jti)

    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return {"message": "Logged out"}
