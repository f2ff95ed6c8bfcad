"""Contact / lead model (tenant-scoped)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Contact(UUIDMixin, SQLModel, table=True):
    __tablename__ = "contacts"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    email: str = Field(nullable=False)
    phone: str = Field(default="", nullable=False)
    company: str = Field(default="", nullable=False)
    company_website: Optional[str] = None
    status: str = Field(default="new", nullable=False)
    avatar_url: Optional[str] = None
    archived: bool = Field(default=False, nullable=False)
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
