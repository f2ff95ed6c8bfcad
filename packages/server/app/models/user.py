"""User model."""

from datetime import date
from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class User(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: Optional[str] = Field(default=None, unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthday: Optional[date] = None
    password_hash: Optional[str] = Field(default=None)  # null for OAuth-only accounts
    role: str = Field(default="user", nullable=False)  # user | admin | super_admin
    # Legacy primary org; the effective org for everyone except super admins
    organization_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="organizations.id", index=True
    )
    # Viewing context picked by a super admin via the org switcher
    current_organization_id: Optional[uuid.UUID] = Field(
        default=None, foreign_key="organizations.id"
    )
    auth_provider: str = Field(default="email", nullable=False)  # email | google
    google_id: Optional[str] = Field(default=None, unique=True, index=True)
