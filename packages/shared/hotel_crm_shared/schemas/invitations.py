"""Invitation schemas."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr

from .common import InvitationStatus, MembershipRole


class TeamInviteRequest(BaseModel):
    """Invite an email address to the caller's effective organization."""
    email: EmailStr
    role: MembershipRole = MembershipRole.USER


class AdminInviteRequest(TeamInviteRequest):
    """Super-admin invite. A null organization means the invitee onboards their own hotel."""
    organization_id: Optional[uuid.UUID] = None


class InvitationResponse(BaseModel):
    id: uuid.UUID
    email: str
    organization_id: Optional[uuid.UUID] = None
    role: MembershipRole
    invited_by: Optional[uuid.UUID] = None
    status: InvitationStatus
    sent_at: datetime
    accepted_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class InvitationListResponse(BaseModel):
    data: List[InvitationResponse]
