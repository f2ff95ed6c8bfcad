"""
Google OAuth 2.0 authorization-code exchange.

Only the identity fields the CRM needs are returned; tokens are discarded
once the profile has been read.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import httpx
import structlog

from app.core.config import get_settings
from app.core.errors import BadRequest, Unauthenticated

log = structlog.get_logger()
settings = get_settings()

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


@dataclass
class GoogleProfile:
    google_id: str
    email: Optional[str]
    first_name: str = ""
    last_name: str = ""


def google_configured() -> bool:
    return bool(settings.google_client_id and settings.google_client_secret)


def build_authorization_url(state: str) -> str:
    if not google_configured():
        raise BadRequest("Google OAuth is not configured")
    params = {
        "client_id": settings.google_client_id,
        "redirect_uri": settings.google_redirect_uri,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"


async def exchange_code(code: str) -> GoogleProfile:
    """Exchange an authorization code for the caller's Google profile."""
    if not google_configured():
        raise BadRequest("Google OAuth is not configured")

    async with httpx.AsyncClient(timeout=10.0) as client:
        token_resp = await client.post(
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": settings.google_client_id,
                "client_secret": settings.google_client_secret,
                "redirect_uri": settings.google_redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if token_resp.status_code != 200:
            log.warning("oauth.google.token_exchange_failed", status=token_resp.status_code)
            raise Unauthenticated("Google sign-in failed")
        access_token = token_resp.json()["access_token"]

        info_resp = await client.get(
            GOOGLE_USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if info_resp.status_code != 200:
            log.warning("oauth.google.userinfo_failed", status=info_resp.status_code)
            raise Unauthenticated("Google sign-in failed")
        info = info_resp.json()

    return GoogleProfile(
        google_id=info["sub"],
        email=info.get("email"),
        first_name=info.get("given_name", ""),
        last_name=info.get("family_name", ""),
    )
