"""
Team management API endpoints (org admin or super admin).

GET    /api/team                                 — Members of the effective org
POST   /api/team/invite                          — Invite an email address
GET    /api/team/invitations                     — Invitations of the effective org
POST   /api/team/invitations/{invitationId}/resend
DELETE /api/team/invitations/{invitationId}      — Cancel a pending invitation
PATCH  /api/team/{userId}                        — Change per-org role
DELETE /api/team/{userId}                        — Deactivate membership
POST   /api/team/{userId}/reactivate             — Reactivate membership
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_org_admin
from app.core.database import get_session
from app.core.tenancy import RequestContext
from app.services import invitations as invitation_service
from app.services import memberships as membership_service
from hotel_crm_shared.schemas.common import InvitationStatus
from hotel_crm_shared.schemas.invitations import (
    InvitationListResponse,
    InvitationResponse,
    TeamInviteRequest,
)
from hotel_crm_shared.schemas.users import (
    MembershipListResponse,
    MembershipRoleUpdate,
    MembershipView,
)

router = APIRouter()


@router.get("", response_model=MembershipListResponse)
async def list_team(
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """List all members of the org, active and deactivated."""
    items = await membership_service.list_memberships(session, org_id=ctx.organization_id)
    return MembershipListResponse(data=items)


@router.post("/invite", response_model=InvitationResponse, status_code=201)
async def invite(
    body: TeamInviteRequest,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    return await invitation_service.create_invitation(
        body.email, ctx.organization_id, body.role.value, ctx.user_id, session
    )


@router.get("/invitations", response_model=InvitationListResponse)
async def list_invitations(
    status: Optional[InvitationStatus] = None,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    items = await invitation_service.list_invitations(
        session,
        org_id=ctx.organization_id,
        status=status.value if status else None,
    )
    return InvitationListResponse(data=items)


@router.post("/invitations/{invitationId}/resend", response_model=InvitationResponse)
async def resend_invitation(
    invitationId: uuid.UUID,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    invitation = await invitation_service.get_invitation(
        invitationId, session, org_id=ctx.organization_id
    )
    return await invitation_service.resend_invitation(invitation)


@router.delete("/invitations/{invitationId}", response_model=InvitationResponse)
async def cancel_invitation(
    invitationId: uuid.UUID,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    invitation = await invitation_service.get_invitation(
        invitationId, session, org_id=ctx.organization_id
    )
    return await invitation_service.cancel_invitation(invitation, session)


@router.patch("/{userId}", response_model=MembershipView)
async def update_member_role(
    userId: uuid.UUID,
    body: MembershipRoleUpdate,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    await membership_service.update_membership_role(
        userId, ctx.organization_id, body.role.value, session
    )
    return await membership_service.get_membership_view(userId, ctx.organization_id, session)


@router.delete("/{userId}", response_model=MembershipView)
async def deactivate_member(
    userId: uuid.UUID,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Deactivate a member. The membership row is kept so it can be reactivated."""
    await membership_service.deactivate_member(
        ctx.organization_id, userId, ctx.user_id, session
    )
    return await membership_service.get_membership_view(userId, ctx.organization_id, session)


@router.post("/{userId}/reactivate", response_model=MembershipView)
async def reactivate_member(
    userId: uuid.UUID,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    await membership_service.set_membership_active(userId, ctx.organization_id, True, session)
    return await membership_service.get_membership_view(userId, ctx.organization_id, session)
