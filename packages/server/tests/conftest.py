"""
Shared fixtures for server tests.

- In-memory SQLite (aiosqlite) with real SAVEPOINT support
- The FastAPI app bound to that database through a ``get_session`` override
- An in-memory stand-in for the Redis revocation list
- Seed helpers and a cookie-session login helper
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional
from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import (
    CSRF_COOKIE,
    CSRF_HEADER,
    SESSION_COOKIE,
    create_session_token,
    generate_csrf_token,
    hash_password,
)
from app.core.database import get_session
from app.main import app
from app.models.invitation import Invitation
from app.models.membership import Membership
from app.models.organization import Organization
from app.models.user import User

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)
TEST_PASSWORD = "correct-horse-battery"
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
async def engine():
    eng = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(eng.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    """A session for service-level tests. Not for use alongside ``client``."""
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Redis revocation list
# ---------------------------------------------------------------------------

@pytest.fixture
def redis_store():
    store: dict[str, str] = {}

    async def setex(key, ttl, value):
        store[key] = value

    async def exists(key):
        return int(key in store)

    fake = AsyncMock()
    fake.setex.side_effect = setex
    fake.exists.side_effect = exists

    with patch("app.core.auth.get_redis", AsyncMock(return_value=fake)):
        yield store


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(session_factory, redis_store):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = _get_session
    # https so the Secure session cookies set by the server are sent back
    async with AsyncClient(transport=ASGITransport(app=app), base_url="https://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def login_as(client: AsyncClient, user_id: uuid.UUID) -> None:
    """Give ``client`` a fresh session cookie and matching CSRF token for ``user_id``."""
    token, _jti = create_session_token(user_id)
    csrf = generate_csrf_token()
    client.cookies.clear()
    client.cookies.set(SESSION_COOKIE, token)
    client.cookies.set(CSRF_COOKIE, csrf)
    client.headers[CSRF_HEADER] = csrf


def adopt_session_cookies(client: AsyncClient, response) -> None:
    """After a login/signup response, echo the issued CSRF token like a browser client would."""
    client.headers[CSRF_HEADER] = response.cookies[CSRF_COOKIE]


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------

async def seed_org(
    session: AsyncSession,
    name: str = "Harbourview Hotel",
    *,
    active: bool = True,
    age_days: int = 0,
) -> Organization:
    """Create an organization. Larger ``age_days`` means older."""
    created = BASE_TIME - timedelta(days=age_days)
    org = Organization(name=name, active=active, created_at=created, updated_at=created)
    session.add(org)
    await session.flush()
    return org


async def seed_user(
    session: AsyncSession,
    email: Optional[str] = None,
    *,
    role: str = "user",
    organization_id: Optional[uuid.UUID] = None,
    current_organization_id: Optional[uuid.UUID] = None,
    with_password: bool = True,
) -> User:
    user = User(
        email=email or f"user-{uuid.uuid4().hex[:8]}@example.com",
        first_name="Test",
        last_name="User",
        role=role,
        organization_id=organization_id,
        current_organization_id=current_organization_id,
        password_hash=_PASSWORD_HASH if with_password else None,
    )
    session.add(user)
    await session.flush()
    return user


async def seed_membership(
    session: AsyncSession,
    user: User,
    org: Organization,
    *,
    role: str = "user",
    active: bool = True,
) -> Membership:
    membership = Membership(user_id=user.id, organization_id=org.id, role=role, active=active)
    session.add(membership)
    await session.flush()
    return membership


async def seed_member(
    session: AsyncSession,
    org: Organization,
    email: Optional[str] = None,
    *,
    role: str = "user",
) -> User:
    """A regular user whose primary org is ``org``, with an active membership there."""
    user = await seed_user(session, email, organization_id=org.id)
    await seed_membership(session, user, org, role=role)
    return user


async def seed_invitation(
    session: AsyncSession,
    email: str,
    org: Optional[Organization],
    *,
    role: str = "user",
    status: str = "pending",
    sent_offset_minutes: int = 0,
) -> Invitation:
    invitation = Invitation(
        email=email,
        organization_id=org.id if org is not None else None,
        role=role,
        status=status,
        sent_at=BASE_TIME + timedelta(minutes=sent_offset_minutes),
    )
    session.add(invitation)
    await session.flush()
    return invitation
