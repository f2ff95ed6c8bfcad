"""Organization (hotel) model. The tenant boundary."""

from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Organization(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organizations"

    name: str = Field(nullable=False, index=True)
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    room_count: Optional[int] = None
    meeting_space_sqft: Optional[int] = None
    profile: dict = Field(default_factory=dict, sa_type=sa.JSON, nullable=False)
    # False = archived: rows retained, all tenant access rejected
    active: bool = Field(default=True, nullable=False, index=True)
