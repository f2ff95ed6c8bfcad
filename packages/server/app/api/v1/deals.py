"""
Deal API endpoints. All rows are scoped to the caller's effective org.

GET    /api/deals                      — List deals (?stage=)
POST   /api/deals                      — Create a deal
GET    /api/deals/{dealId}             — Get a deal
PATCH  /api/deals/{dealId}             — Update a deal
DELETE /api/deals/{dealId}             — Delete a deal
GET    /api/deals/{dealId}/activities
"""

from __future__ import annotations

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_tenant_context
from app.core.database import get_session
from app.core.tenancy import RequestContext
from app.models.activity import Activity
from app.models.contact import Contact
from app.models.deal import Deal
from app.services import tenant_data
from hotel_crm_shared.schemas.activities import ActivityRead
from hotel_crm_shared.schemas.common import DealStage
from hotel_crm_shared.schemas.deals import DealCreate, DealRead, DealUpdate

router = APIRouter()


@router.get("", response_model=list[DealRead])
async def list_deals(
    stage: Optional[DealStage] = None,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    filters = [] if stage is None else [Deal.stage == stage.value]
    return await tenant_data.list_scoped(
        session, Deal, ctx.organization_id, *filters,
        order_by=[Deal.created_at.desc()],
    )


@router.post("", response_model=DealRead, status_code=201)
async def create_deal(
    body: DealCreate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    """Create a deal. A referenced contact must belong to the same org."""
    if body.contact_id is not None:
        await tenant_data.get_scoped(session, Contact, body.contact_id, ctx.organization_id)
    return await tenant_data.create_scoped(
        session, Deal, body, ctx.organization_id, created_by=ctx.user_id
    )


@router.get("/{dealId}", response_model=DealRead)
async def get_deal(
    dealId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.get_scoped(session, Deal, dealId, ctx.organization_id)


@router.patch("/{dealId}", response_model=DealRead)
async def update_deal(
    dealId: uuid.UUID,
    body: DealUpdate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    deal = await tenant_data.get_scoped(session, Deal, dealId, ctx.organization_id)
    if body.contact_id is not None:
        await tenant_data.get_scoped(session, Contact, body.contact_id, ctx.organization_id)
    return await tenant_data.update_scoped(session, deal, body)


@router.delete("/{dealId}", status_code=204)
async def delete_deal(
    dealId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    deal = await tenant_data.get_scoped(session, Deal, dealId, ctx.organization_id)
    await session.execute(
        update(Activity)
        .where(Activity.organization_id == ctx.organization_id, Activity.deal_id == deal.id)
        .values(deal_id=None)
        .execution_options(synchronize_session=False)
    )
    await tenant_data.delete_scoped(session, Deal, dealId, ctx.organization_id)


@router.get("/{dealId}/activities", response_model=list[ActivityRead])
async def list_deal_activities(
    dealId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    await tenant_data.get_scoped(session, Deal, dealId, ctx.organization_id)
    return await tenant_data.list_scoped(
        session, Activity, ctx.organization_id, Activity.deal_id == dealId,
        order_by=[Activity.created_at.desc()],
    )
