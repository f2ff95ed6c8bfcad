"""Contract and email template schemas. Variable substitution happens client-side."""

from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from .common import PartialUpdate, TemplateType


class ContractTemplateBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    type: TemplateType
    description: str = ""
    content: str


class ContractTemplateCreate(ContractTemplateBase):
    pass


class ContractTemplateUpdate(PartialUpdate):
    NOT_NULL = ("name", "type", "description", "content")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    type: Optional[TemplateType] = None
    description: Optional[str] = None
    content: Optional[str] = None


class ContractTemplateRead(ContractTemplateBase):
    id: UUID
    organization_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EmailTemplateBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    subject: str
    body: str


class EmailTemplateCreate(EmailTemplateBase):
    pass


class EmailTemplateUpdate(PartialUpdate):
    NOT_NULL = ("name", "subject", "body")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    subject: Optional[str] = None
    body: Optional[str] = None


class EmailTemplateRead(EmailTemplateBase):
    id: UUID
    organization_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
