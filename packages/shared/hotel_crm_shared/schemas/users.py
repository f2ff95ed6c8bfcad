"""User, membership and authentication schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, EmailStr, Field, UUID4

from .common import AuthProvider, GlobalRole, MembershipRole


# ---------------------------------------------------------------------------
# Auth request schemas
# ---------------------------------------------------------------------------

class SignupRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    birthday: Optional[date] = None
    password: str = Field(min_length=8, description="At least 8 characters")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=8, description="At least 8 characters")


# ---------------------------------------------------------------------------
# Membership / role update schemas
# ---------------------------------------------------------------------------

class MembershipRoleUpdate(BaseModel):
    role: MembershipRole


class MembershipActiveUpdate(BaseModel):
    active: bool


class GlobalRoleUpdate(BaseModel):
    role: GlobalRole


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class UserResponse(BaseModel):
    """A user as returned to clients. Never includes the password hash."""
    id: UUID4
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    birthday: Optional[date] = None
    role: GlobalRole
    organization_id: Optional[UUID4] = None
    current_organization_id: Optional[UUID4] = None
    auth_provider: AuthProvider
    created_at: datetime

    model_config = {"from_attributes": True}


class CurrentUserResponse(UserResponse):
    has_organization_membership: bool = False


class MembershipView(BaseModel):
    """Membership joined with the member's user details."""
    user_id: UUID4
    organization_id: UUID4
    role: MembershipRole
    active: bool
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    organization_name: Optional[str] = None
    joined_at: Optional[datetime] = None


class MembershipListResponse(BaseModel):
    data: List[MembershipView]
