"""
Access-control error taxonomy and the JSON error envelope.

Every error is an ``HTTPException`` carrying a machine-readable ``code`` so
clients can tell "log in again" apart from "finish onboarding" apart from
"your hotel was archived".
"""

from __future__ import annotations

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


class CRMError(HTTPException):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(status_code=self.status_code, detail=message or self.message)

    @property
    def error_body(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.detail,
                "status": self.status_code,
            }
        }


class Unauthenticated(CRMError):
    status_code = 401
    code = "UNAUTHENTICATED"
    message = "Not authenticated"


class NoOrganization(CRMError):
    """The caller has no resolvable effective organization; remedy is onboarding."""

    status_code = 409
    code = "NO_ORGANIZATION"
    message = "No organization selected. Create or join an organization first."


class MembershipInactive(CRMError):
    status_code = 403
    code = "ACCOUNT_DEACTIVATED"
    message = "Your account has been deactivated for this organization"


class OrganizationArchived(CRMError):
    status_code = 403
    code = "ORGANIZATION_ARCHIVED"
    message = "This organization has been archived"


class Forbidden(CRMError):
    status_code = 403
    code = "FORBIDDEN"
    message = "You do not have permission to perform this action"


class NotFound(CRMError):
    """Missing rows and rows of another tenant both surface as this."""

    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class Conflict(CRMError):
    status_code = 409
    code = "CONFLICT"
    message = "Conflict"


class BadRequest(CRMError):
    status_code = 400
    code = "BAD_REQUEST"
    message = "Bad request"


class CSRFValidationFailed(CRMError):
    status_code = 403
    code = "CSRF_VALIDATION_FAILED"
    message = "Invalid or missing CSRF token."


async def crm_error_handler(request: Request, exc: CRMError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.error_body)
