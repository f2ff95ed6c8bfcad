"""
Redis client for the session revocation list.

Revoked session ids are stored as ``session:revoked:{jti}`` keys that expire
together with the session token, so the list never needs pruning.
"""

from __future__ import annotations

import redis.asyncio as redis
import structlog

from app.core.config import get_settings

settings = get_settings()
log = structlog.get_logger()

REVOKED_SESSION_PREFIX = "session:revoked:"

_client: redis.Redis | None = None


def revoked_session_key(jti: str) -> str:
    return f"{REVOKED_SESSION_PREFIX}{jti}"


async def get_redis() -> redis.Redis:
    """Get or create the shared client. The connection pool is opened lazily."""
    global _client
    if _client is None:
        _client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            health_check_interval=30,
        )
        log.info("redis.client_created")
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        log.info("redis.client_closed")
