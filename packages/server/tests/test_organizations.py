"""
Integration tests for organization endpoints.

Tests cover:
- Hotel onboarding (creator becomes admin, org becomes primary unless the
  current primary is still usable)
- Listing the orgs a user can work in
- Profile read/update and deep merge of free-form profile data
- Service-level helpers (deep merge, archive toggle)
"""

from __future__ import annotations

import uuid

import pytest
from pydantic import ValidationError

from app.core.auth import CSRF_HEADER
from app.core.errors import NotFound
from app.models.membership import Membership
from app.models.user import User
from app.services.organizations import _deep_merge, create_org, get_org, set_organization_active
from hotel_crm_shared.schemas.organizations import OrgCreateRequest

from conftest import login_as, seed_member, seed_membership, seed_org, seed_user


# ---------------------------------------------------------------------------
# Schema & helper tests (no DB needed)
# ---------------------------------------------------------------------------

class TestOrgSchemas:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            OrgCreateRequest(name="")

    def test_room_count_not_negative(self):
        with pytest.raises(ValidationError):
            OrgCreateRequest(name="Hotel", room_count=-1)


class TestDeepMerge:
    def test_nested_keys_are_merged(self):
        base = {"amenities": {"pool": True, "spa": False}, "brand": "Indie"}
        patch = {"amenities": {"spa": True}}
        assert _deep_merge(base, patch) == {
            "amenities": {"pool": True, "spa": True},
            "brand": "Indie",
        }

    def test_scalar_replaces_dict(self):
        assert _deep_merge({"a": {"b": 1}}, {"a": 2}) == {"a": 2}

    def test_base_is_not_mutated(self):
        base = {"a": {"b": 1}}
        _deep_merge(base, {"a": {"c": 2}})
        assert base == {"a": {"b": 1}}


# ---------------------------------------------------------------------------
# Service tests
# ---------------------------------------------------------------------------

class TestOrgService:
    async def test_creator_becomes_admin_and_primary(self, db):
        user = await seed_user(db)
        org = await create_org(OrgCreateRequest(name="Seaside Inn"), user, db)

        membership = await db.get(Membership, (user.id, org.id))
        assert membership.role == "admin"
        assert membership.active
        assert user.organization_id == org.id

    async def test_second_org_keeps_primary(self, db):
        home = await seed_org(db, "Home")
        user = await seed_member(db, home)

        org = await create_org(OrgCreateRequest(name="Second"), user, db)
        assert user.organization_id == home.id
        assert (await db.get(Membership, (user.id, org.id))).role == "admin"

    async def test_deactivated_primary_is_repointed(self, db):
        home = await seed_org(db, "Home")
        user = await seed_user(db, organization_id=home.id)
        await seed_membership(db, user, home, active=False)

        org = await create_org(OrgCreateRequest(name="Fresh Start"), user, db)
        assert user.organization_id == org.id

    async def test_archived_primary_is_repointed(self, db):
        closed = await seed_org(db, "Closed", active=False)
        user = await seed_member(db, closed)

        org = await create_org(OrgCreateRequest(name="Reopened"), user, db)
        assert user.organization_id == org.id

    async def test_set_org_active(self, db):
        org = await seed_org(db)
        assert not (await set_organization_active(org.id, False, db)).active
        assert (await set_organization_active(org.id, True, db)).active

    async def test_get_missing_org(self, db):
        with pytest.raises(NotFound):
            await get_org(uuid.uuid4(), db)


# ---------------------------------------------------------------------------
# HTTP tests
# ---------------------------------------------------------------------------

class TestOnboarding:
    async def test_create_org(self, client, session_factory):
        async with session_factory() as s:
            user = await seed_user(s, "founder@seaside.com")
            await s.commit()

        login_as(client, user.id)
        assert (await client.get("/api/organization/profile")).status_code == 409

        resp = await client.post("/api/organizations", json={
            "name": "Seaside Inn",
            "city": "Cape Town",
            "room_count": 42,
            "profile": {"brand": "Independent"},
        })
        assert resp.status_code == 201
        org = resp.json()
        assert org["name"] == "Seaside Inn"
        assert org["active"] is True
        assert org["profile"] == {"brand": "Independent"}

        async with session_factory() as s:
            stored = await s.get(User, user.id)
            assert str(stored.organization_id) == org["id"]

        profile = await client.get("/api/organization/profile")
        assert profile.status_code == 200
        assert profile.json()["id"] == org["id"]

    async def test_onboarding_after_deactivation(self, client, session_factory):
        async with session_factory() as s:
            old = await seed_org(s, "Old Employer")
            user = await seed_user(s, "mover@seaside.com", organization_id=old.id)
            await seed_membership(s, user, old, active=False)
            await s.commit()

        login_as(client, user.id)
        blocked = await client.get("/api/contacts")
        assert blocked.json()["error"]["code"] == "ACCOUNT_DEACTIVATED"

        resp = await client.post("/api/organizations", json={"name": "Own Place"})
        assert resp.status_code == 201
        assert (await client.get("/api/contacts")).status_code == 200

    async def test_create_requires_login(self, client):
        resp = await client.post("/api/organizations", json={"name": "Anon Hotel"})
        assert resp.status_code == 401

    async def test_list_only_active_memberships(self, client, session_factory):
        async with session_factory() as s:
            home = await seed_org(s, "Home Hotel")
            left = await seed_org(s, "Left Hotel")
            archived = await seed_org(s, "Archived Hotel", active=False)
            user = await seed_member(s, home, role="admin")
            await seed_membership(s, user, left, active=False)
            await seed_membership(s, user, archived)
            await s.commit()

        login_as(client, user.id)
        orgs = (await client.get("/api/organizations")).json()["data"]
        assert [(o["name"], o["role"]) for o in orgs] == [("Home Hotel", "admin")]

    async def test_super_admin_lists_all_active(self, client, session_factory):
        async with session_factory() as s:
            await seed_org(s, "B Hotel")
            await seed_org(s, "A Hotel")
            await seed_org(s, "Z Archived", active=False)
            root = await seed_user(s, role="super_admin")
            await s.commit()

        login_as(client, root.id)
        orgs = (await client.get("/api/organizations")).json()["data"]
        assert [o["name"] for o in orgs] == ["A Hotel", "B Hotel"]


class TestProfile:
    @pytest.fixture
    async def hotel(self, session_factory):
        async with session_factory() as s:
            org = await seed_org(s, "Harbourview Hotel")
            org.profile = {"amenities": {"pool": True}, "brand": "Indie"}
            admin = await seed_member(s, org, role="admin")
            staff = await seed_member(s, org)
            await s.commit()
        return org, admin, staff

    async def test_member_can_read(self, client, hotel):
        org, _, staff = hotel
        login_as(client, staff.id)

        resp = await client.get("/api/organization/profile")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Harbourview Hotel"

    async def test_admin_updates_with_deep_merge(self, client, hotel):
        _, admin, _ = hotel
        login_as(client, admin.id)

        resp = await client.patch("/api/organization/profile", json={
            "phone": "+27 21 555 0100",
            "profile": {"amenities": {"spa": True}},
        })
        assert resp.status_code == 200
        body = resp.json()
        assert body["phone"] == "+27 21 555 0100"
        assert body["name"] == "Harbourview Hotel"
        assert body["profile"] == {"amenities": {"pool": True, "spa": True}, "brand": "Indie"}

    async def test_non_admin_cannot_update(self, client, hotel):
        _, _, staff = hotel
        login_as(client, staff.id)

        resp = await client.patch("/api/organization/profile", json={"phone": "nope"})
        assert resp.status_code == 403

    async def test_update_without_csrf_header_rejected(self, client, hotel):
        _, admin, _ = hotel
        login_as(client, admin.id)
        del client.headers[CSRF_HEADER]

        resp = await client.patch("/api/organization/profile", json={"phone": "x"})
        assert resp.status_code == 403
