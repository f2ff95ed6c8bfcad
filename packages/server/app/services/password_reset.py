"""
Password reset service — issues single-use, expiring reset tokens and
consumes them to set a new password.
"""

from __future__ import annotations

import hashlib
import secrets
from datetime import timedelta
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password
from app.core.config import get_settings
from app.core.errors import BadRequest
from app.models.base import utcnow
from app.models.password_reset import PasswordResetToken
from app.models.user import User
from app.services.users import get_user_by_email

log = structlog.get_logger()
settings = get_settings()

INVALID_TOKEN_MESSAGE = "This reset link is invalid or has expired"


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _request_delivery(user: User, reset: PasswordResetToken) -> None:
    """Hand the reset link to the mail sender. Delivery is fire-and-forget."""
    log.info(
        "password_reset.delivery_requested",
        reset_id=str(reset.id),
        user_id=str(user.id),
        email=user.email,
        expires_at=reset.expires_at.isoformat(),
    )


async def issue_reset_token(
    user: User,
    session: AsyncSession,
    *,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a reset token for ``user`` and request its delivery. Returns the raw token."""
    token = secrets.token_urlsafe(32)
    reset = PasswordResetToken(
        user_id=user.id,
        token_hash=hash_reset_token(token),
        expires_at=utcnow() + (expires_delta or timedelta(minutes=settings.password_reset_expire_minutes)),
    )
    session.add(reset)
    await session.flush()

    _request_delivery(user, reset)
    return token


async def request_password_reset(email: str, session: AsyncSession) -> Optional[str]:
    """Issue a reset token for the account behind ``email``, if there is one.

    Callers answer the same way either way, so the endpoint does not reveal
    which emails have accounts.
    """
    user = await get_user_by_email(email, session)
    if user is None:
        log.info("password_reset.unknown_email")
        return None
    return await issue_reset_token(user, session)


async def reset_password(token: str, password: str, session: AsyncSession) -> User:
    """Consume a reset token and set a new password.

    The token is claimed with a conditional UPDATE, so a token can only ever
    be used once, and never after it expires. The user's other outstanding
    tokens are spent at the same time.
    """
    result = await session.execute(
        select(PasswordResetToken).where(PasswordResetToken.token_hash == hash_reset_token(token))
    )
    reset = result.scalar_one_or_none()
    if reset is None:
        log.info("password_reset.unknown_token")
        raise BadRequest(INVALID_TOKEN_MESSAGE)

    claimed = await session.execute(
        update(PasswordResetToken)
        .where(
            PasswordResetToken.id == reset.id,
            PasswordResetToken.used == False,  # noqa: E712
            PasswordResetToken.expires_at > utcnow(),
        )
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        log.info("password_reset.token_rejected", reset_id=str(reset.id))
        raise BadRequest(INVALID_TOKEN_MESSAGE)

    user = await session.get(User, reset.user_id)
    user.password_hash = hash_password(password)
    session.add(user)
    await session.execute(
        update(PasswordResetToken)
        .where(
            PasswordResetToken.user_id == user.id,
            PasswordResetToken.used == False,  # noqa: E712
        )
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    await session.flush()

    log.info("password_reset.completed", user_id=str(user.id))
    return user
