"""
Organization-related Pydantic schemas.

Covers: hotel onboarding/creation, profile read/update, admin archive toggle,
super-admin org switching and cross-hotel rollup stats.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

class OrgProfileFields(BaseModel):
    """Hotel profile fields. Opaque to access control."""

    address: Optional[str] = Field(None, max_length=300)
    city: Optional[str] = Field(None, max_length=100)
    country: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=300)
    room_count: Optional[int] = Field(None, ge=0, description="Number of guest rooms")
    meeting_space_sqft: Optional[int] = Field(
        None, ge=0, description="Total meeting/event space in square feet"
    )
    profile: Optional[dict] = Field(
        None, description="Free-form extra profile data (amenities, brand, ...)"
    )


class OrgCreateRequest(OrgProfileFields):
    name: str = Field(..., min_length=1, max_length=200, description="Hotel display name")


class OrgUpdateRequest(OrgProfileFields):
    name: Optional[str] = Field(None, min_length=1, max_length=200)


class OrgActiveUpdate(BaseModel):
    """Archive (`active=false`) or restore (`active=true`) an organization."""

    active: bool


class SwitchOrgRequest(BaseModel):
    organization_id: uuid.UUID


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class OrgResponse(OrgProfileFields):
    id: uuid.UUID
    name: str
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrgListItem(BaseModel):
    id: uuid.UUID
    name: str
    active: bool
    role: Optional[str] = None  # the requesting user's role in this org, if a member

    model_config = {"from_attributes": True}


class OrgListResponse(BaseModel):
    data: list[OrgListItem]


class RollupStats(BaseModel):
    active_hotels: int
    total_contacts: int
    total_deals: int
    pipeline_value: Decimal
    won_value: Decimal


class CleanupResult(BaseModel):
    count: int
