"""
Organization service — business logic for hotel creation, profile updates,
archiving and cross-hotel maintenance.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

import structlog
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import NotFound
from app.models.contact import Contact
from app.models.deal import Deal
from app.models.membership import Membership
from app.models.organization import Organization
from app.models.user import User
from app.services.memberships import adopt_primary_organization, upsert_membership
from hotel_crm_shared.schemas.common import DealStage, GlobalRole, MembershipRole
from hotel_crm_shared.schemas.organizations import (
    OrgCreateRequest,
    OrgListItem,
    OrgUpdateRequest,
    RollupStats,
)

log = structlog.get_logger()

OPEN_DEAL_STAGES = [
    DealStage.LEAD.value,
    DealStage.QUALIFIED.value,
    DealStage.PROPOSAL.value,
    DealStage.NEGOTIATION.value,
]


def _deep_merge(base: dict, patch: dict) -> dict:
    """JSON Merge Patch style deep merge."""
    result = base.copy()
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


async def list_user_orgs(user: User, session: AsyncSession) -> list[OrgListItem]:
    """Organizations the user can currently work in.

    Super admins see every active organization; everyone else sees the active
    organizations where their membership is active, with their role.
    """
    if user.role == GlobalRole.SUPER_ADMIN.value:
        orgs = await list_orgs(session)
        return [OrgListItem(id=o.id, name=o.name, active=o.active) for o in orgs]

    result = await session.execute(
        select(Organization, Membership.role)
        .join(Membership, Membership.organization_id == Organization.id)
        .where(
            Membership.user_id == user.id,
            Membership.active == True,  # noqa: E712
            Organization.active == True,  # noqa: E712
        )
        .order_by(Organization.name)
    )
    return [
        OrgListItem(id=org.id, name=org.name, active=org.active, role=role)
        for org, role in result.all()
    ]


async def list_orgs(
    session: AsyncSession, *, include_archived: bool = False
) -> list[Organization]:
    stmt = select(Organization)
    if not include_archived:
        stmt = stmt.where(Organization.active == True)  # noqa: E712
    stmt = stmt.order_by(Organization.name)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def create_org(
    req: OrgCreateRequest,
    creator: User,
    session: AsyncSession,
) -> Organization:
    """Create a hotel.

    A regular creator becomes its admin, and it becomes their primary
    organization unless they already have one they can use. Super admins
    create without joining.
    """
    org = Organization(**req.model_dump(exclude_none=True))
    session.add(org)
    await session.flush()

    if creator.role != GlobalRole.SUPER_ADMIN.value:
        await upsert_membership(creator.id, org.id, MembershipRole.ADMIN.value, session)
        await adopt_primary_organization(creator, org.id, session)
        await session.flush()

    log.info("org.created", org_id=str(org.id), name=org.name, creator=str(creator.id))
    return org


async def get_org(org_id: uuid.UUID, session: AsyncSession) -> Organization:
    """Get an org by id, archived or not; raises NotFound if missing."""
    org = await session.get(Organization, org_id)
    if org is None:
        raise NotFound("Organization not found")
    return org


async def update_org(
    org: Organization,
    req: OrgUpdateRequest,
    session: AsyncSession,
) -> Organization:
    """Update profile fields. ``profile`` is deep-merged, everything else replaced."""
    changes = req.model_dump(exclude_unset=True)
    profile_patch = changes.pop("profile", None)

    for field, value in changes.items():
        if field == "name" and value is None:
            continue
        setattr(org, field, value)

    if profile_patch is not None:
        org.profile = _deep_merge(org.profile or {}, profile_patch)

    session.add(org)
    await session.flush()

    log.info("org.updated", org_id=str(org.id), fields=sorted(changes))
    return org


async def set_organization_active(
    org_id: uuid.UUID, active: bool, session: AsyncSession
) -> Organization:
    """Archive or restore a hotel. Memberships and data are left untouched."""
    org = await get_org(org_id, session)
    if org.active != active:
        org.active = active
        session.add(org)
        await session.flush()

    log.info("org.restored" if active else "org.archived", org_id=str(org_id))
    return org


async def cleanup_archived_org_users(session: AsyncSession) -> int:
    """Deactivate every still-active membership of an archived organization."""
    archived = select(Organization.id).where(Organization.active == False)  # noqa: E712
    result = await session.execute(
        update(Membership)
        .where(
            Membership.active == True,  # noqa: E712
            Membership.organization_id.in_(archived),
        )
        .values(active=False)
        .execution_options(synchronize_session=False)
    )
    count = result.rowcount or 0
    log.info("org.archived_members_deactivated", count=count)
    return count


async def rollup_stats(session: AsyncSession) -> RollupStats:
    """Cross-hotel totals over active organizations."""
    active_orgs = select(Organization.id).where(Organization.active == True)  # noqa: E712

    active_hotels = await session.scalar(
        select(func.count()).select_from(Organization).where(Organization.active == True)  # noqa: E712
    )
    total_contacts = await session.scalar(
        select(func.count())
        .select_from(Contact)
        .where(Contact.organization_id.in_(active_orgs), Contact.archived == False)  # noqa: E712
    )
    total_deals = await session.scalar(
        select(func.count()).select_from(Deal).where(Deal.organization_id.in_(active_orgs))
    )
    pipeline_value = await session.scalar(
        select(func.coalesce(func.sum(Deal.value), 0)).where(
            Deal.organization_id.in_(active_orgs),
            Deal.stage.in_(OPEN_DEAL_STAGES),
        )
    )
    won_value = await session.scalar(
        select(func.coalesce(func.sum(Deal.value), 0)).where(
            Deal.organization_id.in_(active_orgs),
            Deal.stage == DealStage.CLOSED.value,
        )
    )

    return RollupStats(
        active_hotels=active_hotels or 0,
        total_contacts=total_contacts or 0,
        total_deals=total_deals or 0,
        pipeline_value=Decimal(str(pipeline_value or 0)),
        won_value=Decimal(str(won_value or 0)),
    )
