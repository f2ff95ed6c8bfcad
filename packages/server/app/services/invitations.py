"""
Invitation service — issuing, cancelling and resending invitations, and
resolving pending invitations into memberships when a user authenticates.
"""

from __future__ import annotations

import uuid
from typing import Optional

import structlog
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.database import unit_of_work
from app.core.errors import Conflict, NotFound
from app.models.base import utcnow
from app.models.invitation import Invitation
from app.models.organization import Organization
from app.models.user import User
from app.services.memberships import adopt_primary_organization, upsert_membership
from hotel_crm_shared.schemas.common import InvitationStatus

log = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _request_delivery(invitation: Invitation) -> None:
    """Hand the invitation to the mail sender. Delivery is fire-and-forget."""
    log.info(
        "invitation.delivery_requested",
        invitation_id=str(invitation.id),
        email=invitation.email,
        org_id=str(invitation.organization_id) if invitation.organization_id else None,
    )


# ---------------------------------------------------------------------------
# Issuing
# ---------------------------------------------------------------------------

async def create_invitation(
    email: str,
    org_id: Optional[uuid.UUID],
    role: str,
    invited_by: Optional[uuid.UUID],
    session: AsyncSession,
) -> Invitation:
    """Issue an invitation, or refresh the pending one for the same email and org."""
    email = normalize_email(email)

    if org_id is not None:
        org = await session.get(Organization, org_id)
        if org is None:
            raise NotFound("Organization not found")
        if not org.active:
            raise Conflict("Cannot invite users to an archived organization")

    stmt = select(Invitation).where(
        Invitation.email == email,
        Invitation.status == InvitationStatus.PENDING.value,
    )
    if org_id is None:
        stmt = stmt.where(Invitation.organization_id.is_(None))
    else:
        stmt = stmt.where(Invitation.organization_id == org_id)
    existing = (await session.execute(stmt)).scalars().first()

    if existing is not None:
        existing.role = role
        existing.invited_by = invited_by
        session.add(existing)
        await session.flush()
        log.info("invitation.refreshed", invitation_id=str(existing.id), email=email)
        _request_delivery(existing)
        return existing

    invitation = Invitation(
        email=email,
        organization_id=org_id,
        role=role,
        invited_by=invited_by,
        status=InvitationStatus.PENDING.value,
    )
    session.add(invitation)
    await session.flush()

    log.info(
        "invitation.created",
        invitation_id=str(invitation.id),
        email=email,
        org_id=str(org_id) if org_id else None,
        role=role,
    )
    _request_delivery(invitation)
    return invitation


async def list_invitations(
    session: AsyncSession,
    *,
    org_id: Optional[uuid.UUID] = None,
    status: Optional[str] = None,
) -> list[Invitation]:
    stmt = select(Invitation)
    if org_id is not None:
        stmt = stmt.where(Invitation.organization_id == org_id)
    if status is not None:
        stmt = stmt.where(Invitation.status == status)
    stmt = stmt.order_by(Invitation.sent_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_invitation(
    invitation_id: uuid.UUID,
    session: AsyncSession,
    *,
    org_id: Optional[uuid.UUID] = None,
) -> Invitation:
    """Load an invitation. When ``org_id`` is given, invitations of other orgs are not found."""
    invitation = await session.get(Invitation, invitation_id)
    if invitation is None:
        raise NotFound("Invitation not found")
    if org_id is not None and invitation.organization_id != org_id:
        raise NotFound("Invitation not found")
    return invitation


async def cancel_invitation(invitation: Invitation, session: AsyncSession) -> Invitation:
    if invitation.status != InvitationStatus.PENDING.value:
        raise Conflict(f"Invitation is already {invitation.status}")
    invitation.status = InvitationStatus.CANCELLED.value
    session.add(invitation)
    await session.flush()
    log.info("invitation.cancelled", invitation_id=str(invitation.id))
    return invitation


async def resend_invitation(invitation: Invitation) -> Invitation:
    if invitation.status != InvitationStatus.PENDING.value:
        raise Conflict(f"Invitation is already {invitation.status}")
    _request_delivery(invitation)
    return invitation


# ---------------------------------------------------------------------------
# Resolution at authentication time
# ---------------------------------------------------------------------------

async def _claim(invitation: Invitation, session: AsyncSession) -> bool:
    """Move a pending invitation to accepted. False if someone else got there first."""
    result = await session.execute(
        update(Invitation)
        .where(
            Invitation.id == invitation.id,
            Invitation.status == InvitationStatus.PENDING.value,
        )
        .values(status=InvitationStatus.ACCEPTED.value, accepted_at=utcnow())
    )
    return result.rowcount == 1


async def resolve_pending_invitations(
    email: Optional[str], user: User, session: AsyncSession
) -> list[Invitation]:
    """Turn every pending invitation for ``email`` into an active membership.

    Invitations are applied oldest first, so the earliest one decides the
    primary organization of a user who has no usable one. Each invitation
    commits or rolls back on its own; a failure is logged and the rest still
    run. Invitations without an organization are left pending.
    """
    if not email:
        return []
    email = normalize_email(email)

    result = await session.execute(
        select(Invitation)
        .where(
            Invitation.email == email,
            Invitation.status == InvitationStatus.PENDING.value,
        )
        .order_by(Invitation.sent_at, Invitation.id)
    )
    pending = list(result.scalars().all())

    user_id = user.id
    accepted: list[Invitation] = []
    for invitation in pending:
        invitation_id = invitation.id
        org_id = invitation.organization_id
        if org_id is None:
            log.info("invitation.no_org_skipped", invitation_id=str(invitation_id), user_id=str(user_id))
            continue

        try:
            async with unit_of_work(session):
                if not await _claim(invitation, session):
                    log.info("invitation.already_claimed", invitation_id=str(invitation_id))
                    continue
                await upsert_membership(user_id, org_id, invitation.role, session)
                await adopt_primary_organization(user, org_id, session)
                await session.flush()
        except SQLAlchemyError:
            log.exception(
                "invitation.resolve_failed",
                invitation_id=str(invitation_id),
                user_id=str(user_id),
                org_id=str(org_id),
            )
            # the rolled-back savepoint expires what it touched
            await session.refresh(user)
            continue

        accepted.append(invitation)
        log.info(
            "invitation.accepted",
            invitation_id=str(invitation_id),
            user_id=str(user_id),
            org_id=str(org_id),
            role=invitation.role,
        )

    return accepted
