"""
Organization API endpoints.

GET    /api/organizations            — Orgs the caller can work in
POST   /api/organizations            — Create a hotel (onboarding)
GET    /api/organization/profile     — Effective org profile
PATCH  /api/organization/profile     — Update effective org profile (org admin)
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_current_user, require_org_admin, require_tenant_context
from app.core.database import get_session
from app.core.tenancy import RequestContext
from app.models.user import User
from app.services import organizations as org_service
from hotel_crm_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListResponse,
    OrgResponse,
    OrgUpdateRequest,
)

log = structlog.get_logger()
router = APIRouter()


@router.get("/organizations", response_model=OrgListResponse)
async def list_orgs(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """List orgs the authenticated user belongs to."""
    items = await org_service.list_user_orgs(user, session)
    return OrgListResponse(data=items)


@router.post("/organizations", response_model=OrgResponse, status_code=201)
async def create_org(
    body: OrgCreateRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    """Create a new hotel. The creator becomes its admin."""
    return await org_service.create_org(body, user, session)


@router.get("/organization/profile", response_model=OrgResponse)
async def get_profile(
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await org_service.get_org(ctx.organization_id, session)


@router.patch("/organization/profile", response_model=OrgResponse)
async def update_profile(
    body: OrgUpdateRequest,
    ctx: RequestContext = Depends(require_org_admin),
    session: AsyncSession = Depends(get_session),
):
    """Update hotel profile fields (Admin only). ``profile`` is deep-merged."""
    org = await org_service.get_org(ctx.organization_id, session)
    return await org_service.update_org(org, body, session)
