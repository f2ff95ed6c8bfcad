from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from .common import DealStage, PartialUpdate


class DealBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    contact_id: Optional[UUID] = None
    value: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stage: DealStage = DealStage.LEAD
    probability: int = Field(default=0, ge=0, le=100)
    expected_close_date: Optional[datetime] = None


class DealCreate(DealBase):
    pass


class DealUpdate(PartialUpdate):
    NOT_NULL = ("title", "value", "stage", "probability")

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    contact_id: Optional[UUID] = None
    value: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stage: Optional[DealStage] = None
    probability: Optional[int] = Field(default=None, ge=0, le=100)
    expected_close_date: Optional[datetime] = None


class DealRead(DealBase):
    id: UUID
    organization_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
