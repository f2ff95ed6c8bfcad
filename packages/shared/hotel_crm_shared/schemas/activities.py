from typing import Optional
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from .common import ActivityType


class ActivityCreate(BaseModel):
    type: ActivityType
    description: str = Field(min_length=1)
    contact_id: Optional[UUID] = None
    deal_id: Optional[UUID] = None


class ActivityRead(ActivityCreate):
    id: UUID
    organization_id: UUID
    created_by: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}
