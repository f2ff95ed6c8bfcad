"""Password reset token model. Only a SHA-256 digest of the emailed token is stored."""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, utcnow


class PasswordResetToken(UUIDMixin, SQLModel, table=True):
    __tablename__ = "password_reset_tokens"

    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    token_hash: str = Field(nullable=False, unique=True)
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    used: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
    )
