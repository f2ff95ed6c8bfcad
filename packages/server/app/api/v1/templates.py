"""
Contract and email template endpoints, scoped to the effective org.

/api/contract-templates  — list, get, GET /type/{type}, create, patch, delete
/api/email-templates     — list, get, create, patch, delete
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import require_tenant_context
from app.core.database import get_session
from app.core.tenancy import RequestContext
from app.models.template import ContractTemplate, EmailTemplate
from app.services import tenant_data
from hotel_crm_shared.schemas.common import TemplateType
from hotel_crm_shared.schemas.templates import (
    ContractTemplateCreate,
    ContractTemplateRead,
    ContractTemplateUpdate,
    EmailTemplateCreate,
    EmailTemplateRead,
    EmailTemplateUpdate,
)

contract_router = APIRouter()
email_router = APIRouter()


# ---------------------------------------------------------------------------
# Contract templates
# ---------------------------------------------------------------------------

@contract_router.get("", response_model=list[ContractTemplateRead])
async def list_contract_templates(
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.list_scoped(
        session, ContractTemplate, ctx.organization_id,
        order_by=[ContractTemplate.name],
    )


@contract_router.get("/type/{templateType}", response_model=list[ContractTemplateRead])
async def list_contract_templates_by_type(
    templateType: TemplateType,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.list_scoped(
        session, ContractTemplate, ctx.organization_id,
        ContractTemplate.type == templateType.value,
        order_by=[ContractTemplate.name],
    )


@contract_router.get("/{templateId}", response_model=ContractTemplateRead)
async def get_contract_template(
    templateId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.get_scoped(
        session, ContractTemplate, templateId, ctx.organization_id, label="Template"
    )


@contract_router.post("", response_model=ContractTemplateRead, status_code=201)
async def create_contract_template(
    body: ContractTemplateCreate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.create_scoped(session, ContractTemplate, body, ctx.organization_id)


@contract_router.patch("/{templateId}", response_model=ContractTemplateRead)
async def update_contract_template(
    templateId: uuid.UUID,
    body: ContractTemplateUpdate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    template = await tenant_data.get_scoped(
        session, ContractTemplate, templateId, ctx.organization_id, label="Template"
    )
    return await tenant_data.update_scoped(session, template, body)


@contract_router.delete("/{templateId}", status_code=204)
async def delete_contract_template(
    templateId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    await tenant_data.delete_scoped(
        session, ContractTemplate, templateId, ctx.organization_id, label="Template"
    )


# ---------------------------------------------------------------------------
# Email templates
# ---------------------------------------------------------------------------

@email_router.get("", response_model=list[EmailTemplateRead])
async def list_email_templates(
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.list_scoped(
        session, EmailTemplate, ctx.organization_id,
        order_by=[EmailTemplate.name],
    )


@email_router.get("/{templateId}", response_model=EmailTemplateRead)
async def get_email_template(
    templateId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.get_scoped(
        session, EmailTemplate, templateId, ctx.organization_id, label="Template"
    )


@email_router.post("", response_model=EmailTemplateRead, status_code=201)
async def create_email_template(
    body: EmailTemplateCreate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    return await tenant_data.create_scoped(session, EmailTemplate, body, ctx.organization_id)


@email_router.patch("/{templateId}", response_model=EmailTemplateRead)
async def update_email_template(
    templateId: uuid.UUID,
    body: EmailTemplateUpdate,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    template = await tenant_data.get_scoped(
        session, EmailTemplate, templateId, ctx.organization_id, label="Template"
    )
    return await tenant_data.update_scoped(session, template, body)


@email_router.delete("/{templateId}", status_code=204)
async def delete_email_template(
    templateId: uuid.UUID,
    ctx: RequestContext = Depends(require_tenant_context),
    session: AsyncSession = Depends(get_session),
):
    await tenant_data.delete_scoped(
        session, EmailTemplate, templateId, ctx.organization_id, label="Template"
    )
