"""
Contact API endpoints. All rows are scoped to the caller's effective org.

GET    /api/contacts                      — List contacts (?archived=)
POST   /api/contacts                      — Create a contact
POST   /api/contacts/import               — Bulk create
POST   /api/contacts/bulk-archive         — Archive / unarchive many
GET    /api/contacts/{contactId}          — Get a contact
PATCH  /api/contacts/{contactId}          — Update a contact
DELETE /api/contacts/{contactId}          — Delete a contact
GET    /api/contacts/{contactId}/deals
GET    /api/contacts/{contactId}/activities
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
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
from hotel_crm_shared.schemas.contacts import (
    BulkArchiveResult,
    ContactBulkArchive,
    ContactCreate,
    ContactImport,
    ContactRead,
    ContactUpdate,
)
from hotel_crm_shared.schemas.deals import DealRead

log = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=list[ContactRead])
async def list_contacts(
    archived: Optional[bool] = None,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    filters = [] if archived is None else [Contact.archived == archived]
    return await tenant_data.list_scoped(
        session, Contact, ctx.organization_id, *filters,
        order_by=[Contact.created_at.desc()],
    )


@router.post("", response_model=ContactRead, status_code=201)
async def create_contact(
    body: ContactCreate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.create_scoped(
        session, Contact, body, ctx.organization_id, created_by=ctx.user_id
    )


@router.post("/import", response_model=list[ContactRead], status_code=201)
async def import_contacts(
    body: ContactImport,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    created = [
        await tenant_data.create_scoped(
            session, Contact, item, ctx.organization_id, created_by=ctx.user_id
        )
        for item in body.contacts
    ]
    log.info("contacts.imported", org_id=str(ctx.organization_id), count=len(created))
    return created


@router.post("/bulk-archive", response_model=BulkArchiveResult)
async def bulk_archive(
    body: ContactBulkArchive,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    """Archive or unarchive many contacts. Ids from other orgs are ignored."""
    result = await session.execute(
        update(Contact)
        .where(
            Contact.organization_id == ctx.organization_id,
            Contact.id.in_(body.ids),
        )
        .values(archived=body.archived)
        .execution_options(synchronize_session=False)
    )
    return BulkArchiveResult(updated=result.rowcount or 0)


@router.get("/{contactId}", response_model=ContactRead)
async def get_contact(
    contactId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.get_scoped(session, Contact, contactId, ctx.organization_id)


@router.patch("/{contactId}", response_model=ContactRead)
async def update_contact(
    contactId: uuid.UUID,
    body: ContactUpdate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    contact = await tenant_data.get_scoped(session, Contact, contactId, ctx.organization_id)
    return await tenant_data.update_scoped(session, contact, body)


@router.delete("/{contactId}", status_code=204)
async def delete_contact(
    contactId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    """Delete a contact. Its deals and activities are kept and detached."""
    contact = await tenant_data.get_scoped(session, Contact, contactId, ctx.organization_id)
    for model in (Deal, Activity):
        await session.execute(
            update(model)
            .where(model.organization_id == ctx.organization_id, model.contact_id == contact.id)
            .values(contact_id=None)
            .execution_options(synchronize_session=False)
        )
    await tenant_data.delete_scoped(session, Contact, contactId, ctx.organization_id)


@router.get("/{contactId}/deals", response_model=list[DealRead])
async def list_contact_deals(
    contactId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    await tenant_data.get_scoped(session, Contact, contactId, ctx.organization_id)
    return await tenant_data.list_scoped(
        session, Deal, ctx.organization_id, Deal.contact_id == contactId,
        order_by=[Deal.created_at.desc()],
    )


@router.get("/{contactId}/activities", response_model=list[ActivityRead])
async def list_contact_activities(
    contactId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    await tenant_data.get_scoped(session, Contact, contactId, ctx.organization_id)
    return await tenant_data.list_scoped(
        session, Activity, ctx.organization_id, Activity.contact_id == contactId,
        order_by=[Activity.created_at.desc()],
    )
