"""
User service — account creation, credential checks, Google account linking
and global role changes.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.core.errors import Conflict, NotFound, Unauthenticated
from app.core.oauth import GoogleProfile
from app.models.user import User
from app.services.invitations import normalize_email
from hotel_crm_shared.schemas.common import AuthProvider, GlobalRole
from hotel_crm_shared.schemas.users import SignupRequest

log = structlog.get_logger()


async def get_user_by_email(email: str, session: AsyncSession) -> Optional[User]:
    result = await session.execute(
        select(User).where(User.email == normalize_email(email))
    )
    return result.scalar_one_or_none()


async def get_user(user_id: uuid.UUID, session: AsyncSession) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def signup(req: SignupRequest, session: AsyncSession) -> User:
    """Create an email/password account. New accounts never get an elevated role."""
    email = normalize_email(req.email)
    if await get_user_by_email(email, session) is not None:
        raise Conflict("An account with this email already exists")

    user = User(
        email=email,
        first_name=req.first_name,
        last_name=req.last_name,
        birthday=req.birthday,
        password_hash=hash_password(req.password),
        role=GlobalRole.USER.value,
        auth_provider=AuthProvider.EMAIL.value,
    )
    session.add(user)
    await session.flush()

    log.info("user.signed_up", user_id=str(user.id), provider=user.auth_provider)
    return user


async def authenticate(email: str, password: str, session: AsyncSession) -> User:
    """Check email/password credentials. OAuth-only accounts cannot log in this way."""
    user = await get_user_by_email(email, session)
    if user is None or not user.password_hash:
        raise Unauthenticated("Invalid email or password")
    if not verify_password(password, user.password_hash):
        log.info("auth.login_failed", user_id=str(user.id))
        raise Unauthenticated("Invalid email or password")
    return user


async def login_with_google(profile: GoogleProfile, session: AsyncSession) -> User:
    """Find, link or create the account behind a Google profile."""
    result = await session.execute(
        select(User).where(User.google_id == profile.google_id)
    )
    user = result.scalar_one_or_none()
    if user is not None:
        return user

    if not profile.email:
        raise Unauthenticated("Google account has no email address")

    user = await get_user_by_email(profile.email, session)
    if user is not None:
        user.google_id = profile.google_id
        user.auth_provider = AuthProvider.GOOGLE.value
        session.add(user)
        await session.flush()
        log.info("user.google_linked", user_id=str(user.id))
        return user

    user = User(
        email=normalize_email(profile.email),
        first_name=profile.first_name or None,
        last_name=profile.last_name or None,
        role=GlobalRole.USER.value,
        auth_provider=AuthProvider.GOOGLE.value,
        google_id=profile.google_id,
    )
    session.add(user)
    await session.flush()

    log.info("user.signed_up", user_id=str(user.id), provider=user.auth_provider)
    return user


async def set_global_role(
    user_id: uuid.UUID, role: GlobalRole, session: AsyncSession
) -> User:
    """Change a user's global role.

    Leaving super_admin drops the org-switcher context so the user falls back
    to their primary organization and memberships.
    """
    user = await get_user(user_id, session)
    previous = user.role

    user.role = role.value
    if previous == GlobalRole.SUPER_ADMIN.value and role != GlobalRole.SUPER_ADMIN:
        user.current_organization_id = None

    session.add(user)
    await session.flush()

    log.info("user.role_changed", user_id=str(user_id), previous=previous, role=role.value)
    return user
