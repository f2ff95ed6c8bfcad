"""Sales deal model (tenant-scoped)."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class Deal(UUIDMixin, SQLModel, table=True):
    __tablename__ = "deals"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    contact_id: Optional[uuid.UUID] = Field(default=None, foreign_key="contacts.id", index=True)
    title: str = Field(nullable=False)
    value: Decimal = Field(default=Decimal("0"), sa_type=sa.Numeric(12, 2), nullable=False)
    stage: str = Field(default="lead", nullable=False)  # lead | qualified | proposal | negotiation | closed | lost
    probability: int = Field(default=0, nullable=False)
    expected_close_date: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
    created_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
