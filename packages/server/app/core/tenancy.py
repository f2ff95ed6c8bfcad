"""
Organization scoping: effective-organization resolution, the access gate,
super-admin context repair and organization switching.

Tenant-data handlers depend on ``app.core.auth.require_tenant_context`` and only
ever see an explicit ``RequestContext``; nothing here reads ambient request state.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import (
    Forbidden,
    MembershipInactive,
    NoOrganization,
    NotFound,
    OrganizationArchived,
)
from app.models.membership import Membership
from app.models.organization import Organization
from app.models.user import User
from hotel_crm_shared.schemas.common import GlobalRole, MembershipRole

log = structlog.get_logger()


@dataclass
class RequestContext:
    """Resolved caller + the organization this request's data is scoped to."""

    user: User
    organization_id: Optional[uuid.UUID]
    membership: Optional[Membership] = None

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id

    @property
    def is_super_admin(self) -> bool:
        return self.user.role == GlobalRole.SUPER_ADMIN.value

    @property
    def is_org_admin(self) -> bool:
        if self.is_super_admin:
            return True
        return self.membership is not None and self.membership.role == MembershipRole.ADMIN.value


# ---------------------------------------------------------------------------
# Effective organization
# ---------------------------------------------------------------------------

def effective_organization_id(user: User) -> Optional[uuid.UUID]:
    """The organization a request's tenant data is scoped to.

    Super admins view through ``current_organization_id`` and are never scoped
    by their legacy ``organization_id``; everyone else uses ``organization_id``.
    """
    if user.role == GlobalRole.SUPER_ADMIN.value:
        return user.current_organization_id
    return user.organization_id


async def first_active_organization(session: AsyncSession) -> Optional[Organization]:
    result = await session.execute(
        select(Organization)
        .where(Organization.active == True)  # noqa: E712
        .order_by(Organization.created_at, Organization.name, Organization.id)
        .limit(1)
    )
    return result.scalars().first()


async def repair_super_admin_context(user: User, session: AsyncSession) -> User:
    """Repoint a super admin away from an archived or deleted organization.

    Falls back to the oldest active organization, or clears the pointer when
    no active organization exists.
    """
    if user.current_organization_id is None:
        return user

    org = await session.get(Organization, user.current_organization_id)
    if org is not None and org.active:
        return user

    previous = user.current_organization_id
    replacement = await first_active_organization(session)
    user.current_organization_id = replacement.id if replacement else None
    session.add(user)
    await session.commit()

    log.info(
        "super_admin.context_repaired",
        user_id=str(user.id),
        previous_org_id=str(previous),
        current_org_id=str(user.current_organization_id) if replacement else None,
    )
    return user


# ---------------------------------------------------------------------------
# Access gate
# ---------------------------------------------------------------------------

async def _check_org_access(
    user: User, org_id: uuid.UUID, session: AsyncSession
) -> Membership:
    membership = await session.get(Membership, (user.id, org_id))
    if membership is None or not membership.active:
        log.info("access.denied", reason="membership_inactive", user_id=str(user.id), org_id=str(org_id))
        raise MembershipInactive()

    org = await session.get(Organization, org_id)
    if org is None or not org.active:
        log.info("access.denied", reason="organization_archived", user_id=str(user.id), org_id=str(org_id))
        raise OrganizationArchived()

    return membership


async def assert_access_allowed(user: User, session: AsyncSession) -> RequestContext:
    """Decide whether ``user`` may operate on tenant data, and where.

    Raises NoOrganization, MembershipInactive or OrganizationArchived.
    The returned context may still carry ``organization_id=None`` for a super
    admin that has not picked an organization yet.
    """
    if user.role == GlobalRole.SUPER_ADMIN.value:
        await repair_super_admin_context(user, session)
        return RequestContext(user=user, organization_id=effective_organization_id(user))

    relevant_org_id = user.current_organization_id or user.organization_id
    if relevant_org_id is None:
        raise NoOrganization()

    membership = await _check_org_access(user, relevant_org_id, session)

    org_id = effective_organization_id(user)
    if org_id is None:
        raise NoOrganization()
    if org_id != relevant_org_id:
        membership = await _check_org_access(user, org_id, session)

    return RequestContext(user=user, organization_id=org_id, membership=membership)


# ---------------------------------------------------------------------------
# Super-admin organization switch
# ---------------------------------------------------------------------------

async def switch_current_organization(
    user: User, target_org_id: uuid.UUID, session: AsyncSession
) -> User:
    """Change the organization a super admin is viewing.

    Archived targets are accepted here; the gate repoints on the next request.
    """
    if user.role != GlobalRole.SUPER_ADMIN.value:
        raise Forbidden("Only super admins can switch organizations")

    if user.current_organization_id == target_org_id:
        return user

    if await session.get(Organization, target_org_id) is None:
        raise NotFound("Organization not found")

    previous = user.current_organization_id
    user.current_organization_id = target_org_id
    session.add(user)
    await session.flush()

    log.info(
        "super_admin.org_switched",
        user_id=str(user.id),
        from_org_id=str(previous) if previous else None,
        to_org_id=str(target_org_id),
    )
    return user


