"""Invitation model. Matched to users by email at authentication time."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Invitation(UUIDMixin, SQLModel, table=True):
    __tablename__ = "invitations"

    email: str = Field(nullable=False, index=True)
    # None: no org intended, the invitee onboards their own hotel
    organization_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="organizations.id", index=True
    )
    role: str = Field(nullable=False, default="user")
    invited_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    status: str = Field(nullable=False, default="pending")  # pending | accepted | cancelled
    sent_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
    accepted_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
