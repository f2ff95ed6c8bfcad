"""
Super-admin tooling. Every route requires the global ``super_admin`` role.

GET    /api/admin/organizations                       — Active orgs (switcher)
GET    /api/admin/all-organizations                   — All orgs incl. archived
POST   /api/admin/organizations                       — Create org (no membership)
PATCH  /api/admin/organizations/{orgId}               — Archive / restore
POST   /api/admin/switch-org                          — Change viewing context
GET    /api/admin/all-users                           — Active memberships
GET    /api/admin/deactivated-users                   — Inactive memberships
PATCH  /api/admin/users/{userId}/organizations/{orgId} — Toggle membership
PATCH  /api/admin/users/{userId}/role                 — Change global role
POST   /api/admin/invitations                         — Invite to any (or no) org
POST   /api/admin/cleanup-archived-org-users          — Deactivate archived orgs' members
GET    /api/admin/rollup-stats                        — Cross-hotel totals
"""

from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_super_admin
from app.core.database import get_session
from app.core.tenancy import switch_current_organization
from app.models.user import User
from app.services import invitations as invitation_service
from app.services import memberships as membership_service
from app.services import organizations as org_service
from app.services import users as user_service
from hotel_crm_shared.schemas.invitations import AdminInviteRequest, InvitationResponse
from hotel_crm_shared.schemas.organizations import (
    CleanupResult,
    OrgActiveUpdate,
    OrgCreateRequest,
    OrgListItem,
    OrgListResponse,
    OrgResponse,
    RollupStats,
    SwitchOrgRequest,
)
from hotel_crm_shared.schemas.users import (
    GlobalRoleUpdate,
    MembershipActiveUpdate,
    MembershipListResponse,
    MembershipView,
    UserResponse,
)

log = structlog.get_logger()
router = APIRouter()


# ---------------------------------------------------------------------------
# Organizations
# ---------------------------------------------------------------------------

@router.get("/organizations", response_model=OrgListResponse)
async def list_active_orgs(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    orgs = await org_service.list_orgs(session)
    return OrgListResponse(data=[OrgListItem.model_validate(o) for o in orgs])


@router.get("/all-organizations", response_model=OrgListResponse)
async def list_all_orgs(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    orgs = await org_service.list_orgs(session, include_archived=True)
    return OrgListResponse(data=[OrgListItem.model_validate(o) for o in orgs])


@router.post("/organizations", response_model=OrgResponse, status_code=201)
async def create_org(
    body: OrgCreateRequest,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    return await org_service.create_org(body, admin, session)


@router.patch("/organizations/{orgId}", response_model=OrgResponse)
@router.patch("/organizations/{orgId}/archive", response_model=OrgResponse)
async def set_org_active(
    orgId: uuid.UUID,
    body: OrgActiveUpdate,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    """Archive or restore a hotel. Members lose or regain access on their next request."""
    return await org_service.set_organization_active(orgId, body.active, session)


@router.post("/switch-org", response_model=UserResponse)
async def switch_org(
    body: SwitchOrgRequest,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    return await switch_current_organization(admin, body.organization_id, session)


# ---------------------------------------------------------------------------
# Users & memberships
# ---------------------------------------------------------------------------

@router.get("/all-users", response_model=MembershipListResponse)
async def list_all_users(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    items = await membership_service.list_memberships(session, active=True)
    return MembershipListResponse(data=items)


@router.get("/deactivated-users", response_model=MembershipListResponse)
async def list_deactivated_users(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    items = await membership_service.list_memberships(session, active=False)
    return MembershipListResponse(data=items)


@router.patch("/users/{userId}/organizations/{orgId}", response_model=MembershipView)
async def set_membership_active(
    userId: uuid.UUID,
    orgId: uuid.UUID,
    body: MembershipActiveUpdate,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    await membership_service.set_membership_active(userId, orgId, body.active, session)
    return await membership_service.get_membership_view(userId, orgId, session)


@router.patch("/users/{userId}/role", response_model=UserResponse)
async def set_global_role(
    userId: uuid.UUID,
    body: GlobalRoleUpdate,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    return await user_service.set_global_role(userId, body.role, session)


@router.post("/invitations", response_model=InvitationResponse, status_code=201)
async def invite(
    body: AdminInviteRequest,
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    """Invite to any organization, or to none (the invitee then onboards their own)."""
    return await invitation_service.create_invitation(
        body.email, body.organization_id, body.role.value, admin.id, session
    )


# ---------------------------------------------------------------------------
# Maintenance & reporting
# ---------------------------------------------------------------------------

@router.post("/cleanup-archived-org-users", response_model=CleanupResult)
async def cleanup_archived_org_users(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    count = await org_service.cleanup_archived_org_users(session)
    return CleanupResult(count=count)


@router.get("/rollup-stats", response_model=RollupStats)
async def rollup_stats(
    admin: User = Depends(require_super_admin),
    session: AsyncSession = Depends(get_session),
):
    return await org_service.rollup_stats(session)
