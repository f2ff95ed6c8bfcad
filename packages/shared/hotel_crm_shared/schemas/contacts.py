from typing import Optional, List
from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from datetime import datetime
from .common import PartialUpdate


class ContactBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    phone: str = ""
    company: str = ""
    company_website: Optional[str] = None
    status: str = "new"
    avatar_url: Optional[str] = None


class ContactCreate(ContactBase):
    pass


class ContactUpdate(PartialUpdate):
    NOT_NULL = ("name", "email", "phone", "company", "status", "archived")

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    company_website: Optional[str] = None
    status: Optional[str] = None
    avatar_url: Optional[str] = None
    archived: Optional[bool] = None


class ContactRead(ContactBase):
    id: UUID
    organization_id: UUID
    archived: bool = False
    created_at: datetime

    model_config = {"from_attributes": True}


class ContactImport(BaseModel):
    contacts: List[ContactCreate]


class ContactBulkArchive(BaseModel):
    ids: List[UUID] = Field(min_length=1)
    archived: bool = True


class BulkArchiveResult(BaseModel):
    updated: int
