"""
Membership service — upsert, activation toggles, role changes, primary
organization adoption and the MembershipView read model.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.errors import BadRequest, NotFound
from app.models.membership import Membership
from app.models.organization import Organization
from app.models.user import User
from hotel_crm_shared.schemas.users import MembershipView

log = structlog.get_logger()


def _to_view(membership: Membership, user: User, org: Organization) -> MembershipView:
    return MembershipView(
        user_id=membership.user_id,
        organization_id=membership.organization_id,
        role=membership.role,
        active=membership.active,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        organization_name=org.name,
        joined_at=membership.joined_at,
    )


async def list_memberships(
    session: AsyncSession,
    *,
    org_id: Optional[uuid.UUID] = None,
    active: Optional[bool] = None,
) -> list[MembershipView]:
    """List memberships joined with user and organization details."""
    stmt = (
        select(Membership, User, Organization)
        .join(User, User.id == Membership.user_id)
        .join(Organization, Organization.id == Membership.organization_id)
    )
    if org_id is not None:
        stmt = stmt.where(Membership.organization_id == org_id)
    if active is not None:
        stmt = stmt.where(Membership.active == active)
    stmt = stmt.order_by(Organization.name, User.email)

    result = await session.execute(stmt)
    return [_to_view(m, u, o) for m, u, o in result.all()]


async def get_membership(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> Membership:
    membership = await session.get(Membership, (user_id, org_id))
    if membership is None:
        raise NotFound("User not found in this organization")
    return membership


async def upsert_membership(
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    role: str,
    session: AsyncSession,
) -> Membership:
    """Create the (user, org) membership, or reactivate and re-role an existing one."""
    membership = await session.get(Membership, (user_id, org_id))
    if membership is None:
        membership = Membership(
            user_id=user_id,
            organization_id=org_id,
            role=role,
            active=True,
        )
        session.add(membership)
        await session.flush()
        log.info("membership.created", user_id=str(user_id), org_id=str(org_id), role=role)
        return membership

    changed = []
    if not membership.active:
        membership.active = True
        changed.append("active")
    if membership.role != role:
        membership.role = role
        changed.append("role")

    if changed:
        session.add(membership)
        await session.flush()
        log.info(
            "membership.updated",
            user_id=str(user_id),
            org_id=str(org_id),
            role=role,
            changed=changed,
        )
    return membership


async def set_membership_active(
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    active: bool,
    session: AsyncSession,
) -> Membership:
    """Deactivate (soft delete) or reactivate a membership. The row is never removed."""
    membership = await get_membership(user_id, org_id, session)
    if membership.active != active:
        membership.active = active
        session.add(membership)
        await session.flush()

    log.info(
        "membership.reactivated" if active else "membership.deactivated",
        user_id=str(user_id),
        org_id=str(org_id),
    )
    return membership


async def deactivate_member(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    caller_id: uuid.UUID,
    session: AsyncSession,
) -> Membership:
    if user_id == caller_id:
        raise BadRequest("You cannot deactivate your own membership")
    return await set_membership_active(user_id, org_id, False, session)


async def update_membership_role(
    user_id: uuid.UUID,
    org_id: uuid.UUID,
    role: str,
    session: AsyncSession,
) -> Membership:
    membership = await get_membership(user_id, org_id, session)
    membership.role = role
    session.add(membership)
    await session.flush()
    log.info("membership.role_changed", user_id=str(user_id), org_id=str(org_id), role=role)
    return membership


async def get_membership_view(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> MembershipView:
    result = await session.execute(
        select(Membership, User, Organization)
        .join(User, User.id == Membership.user_id)
        .join(Organization, Organization.id == Membership.organization_id)
        .where(Membership.user_id == user_id, Membership.organization_id == org_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFound("User not found in this organization")
    return _to_view(*row)


async def has_active_membership(user_id: uuid.UUID, session: AsyncSession) -> bool:
    """True if the user holds an active membership in at least one active organization."""
    result = await session.execute(
        select(Membership.organization_id)
        .join(Organization, Organization.id == Membership.organization_id)
        .where(
            Membership.user_id == user_id,
            Membership.active == True,  # noqa: E712
            Organization.active == True,  # noqa: E712
        )
        .limit(1)
    )
    return result.first() is not None


async def has_usable_membership(
    user_id: uuid.UUID, org_id: uuid.UUID, session: AsyncSession
) -> bool:
    """True if the user's membership in ``org_id`` is active and the organization is too."""
    result = await session.execute(
        select(Membership.organization_id)
        .join(Organization, Organization.id == Membership.organization_id)
        .where(
            Membership.user_id == user_id,
            Membership.organization_id == org_id,
            Membership.active == True,  # noqa: E712
            Organization.active == True,  # noqa: E712
        )
    )
    return result.first() is not None


async def adopt_primary_organization(
    user: User, org_id: uuid.UUID, session: AsyncSession
) -> None:
    """Point the user's primary organization at ``org_id`` when the current one
    is missing, deactivated for them, or archived."""
    previous = user.organization_id
    if previous is not None and await has_usable_membership(user.id, previous, session):
        return

    user.organization_id = org_id
    session.add(user)
    if previous is not None:
        log.info(
            "user.primary_org_repointed",
            user_id=str(user.id),
            from_org_id=str(previous),
            to_org_id=str(org_id),
        )
