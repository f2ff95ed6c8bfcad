from enum import Enum
from typing import ClassVar, Tuple
from pydantic import BaseModel, model_validator

class GlobalRole(str, Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

class MembershipRole(str, Enum):
    USER = "user"
    ADMIN = "admin"

class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"

class AuthProvider(str, Enum):
    EMAIL = "email"
    GOOGLE = "google"

class DealStage(str, Enum):
    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED = "closed"
    LOST = "lost"

class ActivityType(str, Enum):
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    NOTE = "note"

class TemplateType(str, Enum):
    CONTRACT = "contract"
    LNR = "lnr"
    GROUP = "group"

class ErrorBody(BaseModel):
    code: str
    message: str
    status: int

class ErrorResponse(BaseModel):
    error: ErrorBody

class PartialUpdate(BaseModel):
    """Base for PATCH bodies. Omitted fields are left alone; an explicit null
    is only accepted for columns that can hold one."""

    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def reject_null_for_required_columns(self):
        nulled = [
            name for name in self.NOT_NULL
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if nulled:
            raise ValueError(f"{', '.join(nulled)} cannot be null")
        return self
