"""
Activity log endpoints.

GET  /api/activities   — List activities of the effective org
POST /api/activities   — Log an activity against a contact and/or deal
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_tenant_context
from app.core.database import get_session
from app.core.tenancy import RequestContext
from app.models.activity import Activity
from app.models.contact import Contact
from app.models.deal import Deal
from app.services import tenant_data
from hotel_crm_shared.schemas.activities import ActivityCreate, ActivityRead

router = APIRouter()


@router.get("", response_model=list[ActivityRead])
async def list_activities(
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.list_scoped(
        session, Activity, ctx.organization_id,
        order_by=[Activity.created_at.desc()],
    )


@router.post("", response_model=ActivityRead, status_code=201)
async def create_activity(
    body: ActivityCreate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    if body.contact_id is not None:
        await tenant_data.get_scoped(session, Contact, body.contact_id, ctx.organization_id)
    if body.deal_id is not None:
        await tenant_data.get_scoped(session, Deal, body.deal_id, ctx.organization_id)
    return await tenant_data.create_scoped(
        session, Activity, body, ctx.organization_id, created_by=ctx.user_id
    )
