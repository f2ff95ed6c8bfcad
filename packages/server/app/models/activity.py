"""Activity log entry (tenant-scoped)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Activity(UUIDMixin, SQLModel, table=True):
    __tablename__ = "activities"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    contact_id: Optional[uuid.UUID] = Field(default=None, foreign_key="contacts.id", index=True)
    deal_id: Optional[uuid.UUID] = Field(default=None, foreign_key="deals.id", index=True)
    type: str = Field(nullable=False)  # call | email | meeting | note
    description: str = Field(nullable=False)
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
