"""
Tests for Authentication and session handling.

Covers:
- Password hashing
- Session JWT creation, decoding, revocation
- CSRF middleware and security headers
- Signup / login / logout / refresh / current user endpoints
- Invitation resolution during signup and login
- Google OAuth login (code exchange mocked)
"""

from __future__ import annotations

import base64
import json
import uuid
from datetime import timedelta
from unittest.mock import AsyncMock, patch

import jwt as pyjwt
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.auth import (
    CSRF_COOKIE,
    CSRF_HEADER,
    SESSION_COOKIE,
    create_session_token,
    decode_session_token,
    generate_csrf_token,
    hash_password,
    verify_password,
)
from app.core.middleware import CSRFMiddleware, SecurityHeadersMiddleware, SECURITY_HEADERS
from app.core.oauth import GoogleProfile
from app.models.membership import Membership
from app.models.user import User

from conftest import (
    TEST_PASSWORD,
    adopt_session_cookies,
    login_as,
    seed_invitation,
    seed_member,
    seed_org,
    seed_user,
)


# ---------------------------------------------------------------------------
# Unit Tests: Password hashing
# ---------------------------------------------------------------------------

class TestPasswordHashing:
    def test_hash_and_verify(self):
        password = "MySecureP@ssw0rd!"
        hashed = hash_password(password)
        assert hashed != password
        assert verify_password(password, hashed)

    def test_wrong_password_fails(self):
        hashed = hash_password("correct-password")
        assert not verify_password("wrong-password", hashed)

    def test_cost_factor_is_12(self):
        assert hash_password("anything").startswith("$2b$12$")


# ---------------------------------------------------------------------------
# Unit Tests: Session JWT
# ---------------------------------------------------------------------------

class TestSessionToken:
    def test_create_and_decode(self):
        uid = uuid.uuid4()
        token, jti = create_session_token(uid)
        payload = decode_session_token(token)
        assert payload["sub"] == str(uid)
        assert payload["jti"] == jti

    def test_carries_no_role_or_org_claims(self):
        token, _ = create_session_token(uuid.uuid4())
        payload = decode_session_token(token)
        assert set(payload) == {"sub", "jti", "iat", "exp"}

    def test_expired_token_raises(self):
        token, _ = create_session_token(uuid.uuid4(), expires_delta=timedelta(seconds=-1))
        with pytest.raises(pyjwt.ExpiredSignatureError):
            decode_session_token(token)

    def test_tampered_token_raises(self):
        token, _ = create_session_token(uuid.uuid4())
        header, _payload, signature = token.split(".")
        forged = base64.urlsafe_b64encode(json.dumps({
            "sub": str(uuid.uuid4()),
            "jti": "forged",
            "iat": 0,
            "exp": 4102444800,
        }).encode()).rstrip(b"=").decode()
        tampered = ".".join([header, forged, signature])
        with pytest.raises(pyjwt.InvalidSignatureError):
            decode_session_token(tampered)


class TestSessionRevocation:
    async def test_revoke_and_check(self):
        mock_redis = AsyncMock()
        mock_redis.exists = AsyncMock(return_value=1)

        with patch("app.core.auth.get_redis", return_value=mock_redis):
            from app.core.auth import is_session_revoked, revoke_session

            await revoke_session("test-jti-123", ttl_seconds=3600)
            mock_redis.setex.assert_called_once_with("session:revoked:test-jti-123", 3600, "1")
            assert await is_session_revoked("test-jti-123") is True

    async def test_non_revoked_session(self):
        mock_redis = AsyncMock()
        mock_redis.exists = AsyncMock(return_value=0)

        with patch("app.core.auth.get_redis", return_value=mock_redis):
            from app.core.auth import is_session_revoked

            assert await is_session_revoked("non-existent-jti") is False


class TestCSRFToken:
    def test_generates_unique_tokens(self):
        t1 = generate_csrf_token()
        t2 = generate_csrf_token()
        assert t1 != t2
        assert len(t1) > 20


# ---------------------------------------------------------------------------
# Integration Tests: Middleware
# ---------------------------------------------------------------------------

class TestSecurityHeadersMiddleware:
    def test_headers_present(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"ok": True}

        client = TestClient(app)
        resp = client.get("/test")
        assert resp.status_code == 200
        for header, value in SECURITY_HEADERS.items():
            assert resp.headers.get(header) == value

    def test_docs_page_has_no_csp(self):
        app = FastAPI()
        app.add_middleware(SecurityHeadersMiddleware)

        resp = TestClient(app).get("/docs")
        assert resp.status_code == 200
        assert "Content-Security-Policy" not in resp.headers
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestCSRFMiddleware:
    def _make_app(self) -> FastAPI:
        app = FastAPI()
        app.add_middleware(CSRFMiddleware)

        @app.get("/test")
        async def get_test():
            return {"ok": True}

        @app.post("/test")
        async def post_test():
            return {"ok": True}

        return app

    def test_get_passes_without_csrf(self):
        client = TestClient(self._make_app())
        assert client.get("/test").status_code == 200

    def test_post_without_session_cookie_passes(self):
        """No session cookie = signup/login or a non-browser client, skip CSRF."""
        client = TestClient(self._make_app())
        assert client.post("/test").status_code == 200

    def test_post_with_session_but_no_csrf_fails(self):
        client = TestClient(self._make_app(), cookies={SESSION_COOKIE: "some-jwt"})
        resp = client.post("/test")
        assert resp.status_code == 403
        assert resp.json()["error"]["code"] == "CSRF_VALIDATION_FAILED"

    def test_post_with_matching_csrf_passes(self):
        csrf_token = "test-csrf-token"
        client = TestClient(
            self._make_app(),
            cookies={SESSION_COOKIE: "some-jwt", CSRF_COOKIE: csrf_token},
        )
        resp = client.post("/test", headers={CSRF_HEADER: csrf_token})
        assert resp.status_code == 200

    def test_post_with_mismatched_csrf_fails(self):
        client = TestClient(
            self._make_app(),
            cookies={SESSION_COOKIE: "some-jwt", CSRF_COOKIE: "token-a"},
        )
        resp = client.post("/test", headers={CSRF_HEADER: "token-b"})
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Integration Tests: Auth endpoints
# ---------------------------------------------------------------------------

SIGNUP = {
    "first_name": "Sam",
    "last_name": "Seller",
    "email": "Sam@Hotel.com",
    "password": "long-enough-password",
}


class TestSignup:
    async def test_signup_creates_plain_user(self, client):
        resp = await client.post("/api/auth/signup", json=SIGNUP)
        assert resp.status_code == 201
        data = resp.json()
        assert data["email"] == "sam@hotel.com"
        assert data["role"] == "user"
        assert data["auth_provider"] == "email"
        assert data["organization_id"] is None
        assert "password_hash" not in data
        assert SESSION_COOKIE in resp.cookies
        assert CSRF_COOKIE in resp.cookies

    async def test_signup_ignores_role_in_body(self, client):
        resp = await client.post("/api/auth/signup", json={**SIGNUP, "role": "super_admin"})
        assert resp.status_code == 201
        assert resp.json()["role"] == "user"

    async def test_duplicate_email(self, client):
        await client.post("/api/auth/signup", json=SIGNUP)
        client.cookies.clear()
        resp = await client.post("/api/auth/signup", json={**SIGNUP, "email": "sam@hotel.com"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    async def test_short_password_rejected(self, client):
        resp = await client.post("/api/auth/signup", json={**SIGNUP, "password": "short"})
        assert resp.status_code == 422

    async def test_new_user_without_invitation_needs_onboarding(self, client):
        resp = await client.post("/api/auth/signup", json=SIGNUP)
        adopt_session_cookies(client, resp)

        me = await client.get("/api/auth/user")
        assert me.status_code == 200
        assert me.json()["has_organization_membership"] is False

        contacts = await client.get("/api/contacts")
        assert contacts.status_code == 409
        assert contacts.json()["error"]["code"] == "NO_ORGANIZATION"

    async def test_invited_user_lands_in_org(self, client, session_factory):
        async with session_factory() as s:
            org = await seed_org(s, "Harbourview")
            await seed_invitation(s, "sam@hotel.com", org, role="user")
            await s.commit()

        resp = await client.post("/api/auth/signup", json=SIGNUP)
        assert resp.status_code == 201
        assert resp.json()["organization_id"] == str(org.id)
        adopt_session_cookies(client, resp)

        me = await client.get("/api/auth/user")
        assert me.json()["has_organization_membership"] is True

        async with session_factory() as s:
            membership = await s.get(Membership, (uuid.UUID(me.json()["id"]), org.id))
            assert membership.active
            assert membership.role == "user"

        assert (await client.get("/api/contacts")).status_code == 200


class TestLogin:
    async def test_login_success(self, client, session_factory):
        async with session_factory() as s:
            org = await seed_org(s)
            user = await seed_member(s, org, "amy@hotel.com")
            await s.commit()

        resp = await client.post(
            "/api/auth/login", json={"email": "amy@hotel.com", "password": TEST_PASSWORD}
        )
        assert resp.status_code == 200
        assert resp.json()["id"] == str(user.id)
        assert SESSION_COOKIE in resp.cookies

    async def test_bad_password_and_unknown_email_look_the_same(self, client, session_factory):
        async with session_factory() as s:
            await seed_user(s, "amy@hotel.com")
            await s.commit()

        bad_pw = await client.post(
            "/api/auth/login", json={"email": "amy@hotel.com", "password": "nope"}
        )
        unknown = await client.post(
            "/api/auth/login", json={"email": "ghost@hotel.com", "password": "nope"}
        )
        assert bad_pw.status_code == unknown.status_code == 401
        assert bad_pw.json() == unknown.json()

    async def test_oauth_only_account_cannot_password_login(self, client, session_factory):
        async with session_factory() as s:
            await seed_user(s, "g@hotel.com", with_password=False)
            await s.commit()

        resp = await client.post("/api/auth/login", json={"email": "g@hotel.com", "password": "x"})
        assert resp.status_code == 401

    async def test_login_resolves_invitation_sent_after_signup(self, client, session_factory):
        async with session_factory() as s:
            home = await seed_org(s, "Home")
            other = await seed_org(s, "Other")
            user = await seed_member(s, home, "amy@hotel.com")
            await seed_invitation(s, "amy@hotel.com", other, role="admin")
            await s.commit()

        resp = await client.post(
            "/api/auth/login", json={"email": "amy@hotel.com", "password": TEST_PASSWORD}
        )
        assert resp.status_code == 200
        assert resp.json()["organization_id"] == str(home.id)

        async with session_factory() as s:
            membership = await s.get(Membership, (user.id, other.id))
            assert membership.active
            assert membership.role == "admin"


class TestSession:
    async def test_current_user_requires_session(self, client):
        resp = await client.get("/api/auth/user")
        assert resp.status_code == 401
        assert resp.json()["error"]["code"] == "UNAUTHENTICATED"

    async def test_garbage_cookie_is_unauthenticated(self, client):
        client.cookies.set(SESSION_COOKIE, "not-a-jwt")
        assert (await client.get("/api/auth/user")).status_code == 401

    async def test_token_for_deleted_user(self, client):
        login_as(client, uuid.uuid4())
        assert (await client.get("/api/auth/user")).status_code == 401

    async def test_logout_revokes_session(self, client, session_factory, redis_store):
        async with session_factory() as s:
            org = await seed_org(s)
            user = await seed_member(s, org)
            await s.commit()

        login_as(client, user.id)
        token = client.cookies.get(SESSION_COOKIE)
        assert (await client.get("/api/auth/user")).status_code == 200

        resp = await client.post("/api/auth/logout")
        assert resp.status_code == 200
        jti = decode_session_token(token)["jti"]
        assert f"session:revoked:{jti}" in redis_store

        client.cookies.set(SESSION_COOKIE, token)
        assert (await client.get("/api/auth/user")).status_code == 401

    async def test_refresh_issues_new_token(self, client, session_factory, redis_store):
        async with session_factory() as s:
            org = await seed_org(s)
            user = await seed_member(s, org)
            await s.commit()

        login_as(client, user.id)
        old_jti = decode_session_token(client.cookies.get(SESSION_COOKIE))["jti"]

        resp = await client.post("/api/auth/refresh")
        assert resp.status_code == 200
        new_token = resp.cookies[SESSION_COOKIE]
        assert decode_session_token(new_token)["jti"] != old_jti
        assert f"session:revoked:{old_jti}" in redis_store

    async def test_super_admin_always_has_membership_flag(self, client, session_factory):
        async with session_factory() as s:
            admin = await seed_user(s, role="super_admin")
            await s.commit()

        login_as(client, admin.id)
        data = (await client.get("/api/auth/user")).json()
        assert data["role"] == "super_admin"
        assert data["has_organization_membership"] is True


# ---------------------------------------------------------------------------
# Integration Tests: Google OAuth
# ---------------------------------------------------------------------------

class TestGoogleOAuth:
    async def test_not_configured(self, client):
        with patch("app.core.oauth.google_configured", return_value=False):
            resp = await client.get("/api/auth/google")
        assert resp.status_code == 400

    async def test_authorization_url(self, client):
        with patch("app.core.oauth.google_configured", return_value=True):
            resp = await client.get("/api/auth/google")
        assert resp.status_code == 200
        assert resp.json()["authorization_url"].startswith("https://accounts.google.com/")
        assert "crm_oauth_state" in resp.cookies

    async def test_state_mismatch(self, client):
        resp = await client.get("/api/auth/google/callback?code=abc&state=forged")
        assert resp.status_code == 401

    async def _callback(self, client, profile: GoogleProfile):
        client.cookies.set("crm_oauth_state", "expected-state")
        with patch(
            "app.api.v1.auth.exchange_code", AsyncMock(return_value=profile)
        ):
            return await client.get(
                "/api/auth/google/callback?code=abc&state=expected-state",
                follow_redirects=False,
            )

    async def test_callback_creates_user_and_resolves_invitation(self, client, session_factory):
        async with session_factory() as s:
            org = await seed_org(s)
            await seed_invitation(s, "gina@hotel.com", org)
            await s.commit()

        resp = await self._callback(
            client, GoogleProfile(google_id="g-123", email="Gina@hotel.com", first_name="Gina")
        )
        assert resp.status_code == 302
        assert SESSION_COOKIE in resp.cookies

        async with session_factory() as s:
            from sqlmodel import select
            user = (await s.execute(select(User).where(User.google_id == "g-123"))).scalar_one()
            assert user.email == "gina@hotel.com"
            assert user.auth_provider == "google"
            assert user.password_hash is None
            assert user.role == "user"
            assert user.organization_id == org.id

    async def test_callback_links_existing_email_account(self, client, session_factory):
        async with session_factory() as s:
            user = await seed_user(s, "amy@hotel.com")
            await s.commit()

        resp = await self._callback(client, GoogleProfile(google_id="g-456", email="amy@hotel.com"))
        assert resp.status_code == 302

        async with session_factory() as s:
            stored = await s.get(User, user.id)
            assert stored.google_id == "g-456"
            assert stored.auth_provider == "google"
            assert stored.password_hash is not None
