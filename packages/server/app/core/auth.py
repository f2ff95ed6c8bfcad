"""
Authentication for the Hotel CRM API.

Supports:
- Email/Password login with bcrypt-hashed passwords
- Google OAuth accounts (no password hash)
- JWT session cookie carrying only the user id, with Redis revocation list
- Role dependencies for super-admin tooling

The session never caches roles, memberships or organization state: every
request reloads the user and re-runs the access checks in ``app.core.tenancy``.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_session
from app.core.errors import Forbidden, NoOrganization, Unauthenticated
from app.core.redis import get_redis, revoked_session_key
from app.core.tenancy import RequestContext, assert_access_allowed, repair_super_admin_context
from app.models.user import User
from hotel_crm_shared.schemas.common import GlobalRole

log = structlog.get_logger()
settings = get_settings()

SESSION_COOKIE = "crm_session"
CSRF_COOKIE = "crm_csrf"
CSRF_HEADER = "X-CSRF-Token"

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str) -> str:
    """Hash a password using bcrypt with cost factor 12."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=12)).decode()


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), hashed.encode())


# ---------------------------------------------------------------------------
# Session JWT
# ---------------------------------------------------------------------------

def create_session_token(
    user_id: uuid.UUID,
    *,
    expires_delta: timedelta | None = None,
) -> tuple[str, str]:
    """Create a signed session JWT. Returns (token, jti)."""
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.session_expire_minutes))
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": exp,
        "jti": jti,
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def decode_session_token(token: str) -> dict:
    """Decode and verify a session JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


# ---------------------------------------------------------------------------
# Session revocation (Redis)
# ---------------------------------------------------------------------------

async def revoke_session(jti: str, ttl_seconds: int | None = None) -> None:
    """Add a session JWT id to the revocation list in Redis."""
    redis = await get_redis()
    ttl = ttl_seconds or settings.session_expire_minutes * 60
    await redis.setex(revoked_session_key(jti), ttl, "1")


async def is_session_revoked(jti: str) -> bool:
    """Check if a session JWT id has been revoked."""
    redis = await get_redis()
    return await redis.exists(revoked_session_key(jti)) > 0


# ---------------------------------------------------------------------------
# CSRF Token
# ---------------------------------------------------------------------------

def generate_csrf_token() -> str:
    """Generate a random CSRF token."""
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Authentication dependencies
# ---------------------------------------------------------------------------

async def resolve_session_identity(request: Request) -> uuid.UUID:
    """Resolve the session cookie to a user id, or raise Unauthenticated."""
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise Unauthenticated()

    try:
        payload = decode_session_token(token)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise Unauthenticated("Invalid or expired session")

    jti = payload.get("jti")
    if jti and await is_session_revoked(jti):
        raise Unauthenticated("Session has been revoked")

    return user_id


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> User:
    """Authenticate the request and load a fresh User row.

    Super admins pointed at an archived or missing organization are repointed
    here, before any handler can read ``current_organization_id``.
    """
    user_id = await resolve_session_identity(request)

    user = await session.get(User, user_id)
    if not user:
        raise Unauthenticated("User not found")

    if user.role == GlobalRole.SUPER_ADMIN.value:
        await repair_super_admin_context(user, session)

    return user


async def require_super_admin(
    user: User = Depends(get_current_user),
) -> User:
    """Requires the global super_admin role."""
    if user.role != GlobalRole.SUPER_ADMIN.value:
        raise Forbidden("Super admin access required")
    return user


# ---------------------------------------------------------------------------
# Tenant-scoped authorization dependencies
# ---------------------------------------------------------------------------

async def require_tenant_context(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> RequestContext:
    """Gate for every tenant-data route. Guarantees an organization id."""
    context = await assert_access_allowed(user, session)
    if context.organization_id is None:
        raise NoOrganization()
    return context


async def require_org_admin(
    context: RequestContext = Depends(require_tenant_context),
) -> RequestContext:
    """Requires the admin role in the effective organization (or super admin)."""
    if not context.is_org_admin:
        raise Forbidden("Organization admin access required")
    return context
