"""Contract and email template models (tenant-scoped)."""

import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class ContractTemplate(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "contract_templates"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    type: str = Field(nullable=False)  # contract | lnr | group
    description: str = Field(default="", nullable=False)
    content: str = Field(nullable=False)


class EmailTemplate(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "email_templates"

    organization_id: uuid.UUID = Field(foreign_key="organizations.id", nullable=False, index=True)
    name: str = Field(nullable=False)
    subject: str = Field(nullable=False)
    body: str = Field(nullable=False)
