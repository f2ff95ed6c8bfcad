"""
API Router

Tenant-data routes resolve their organization from the caller's session via
``require_tenant_context``; no route takes an organization id from the client.
"""

from fastapi import APIRouter
from . import activities, admin, contacts, deals, organizations, team
from .templates import contract_router, email_router

router = APIRouter()

# Onboarding and effective org profile
router.include_router(organizations.router, tags=["Organizations"])

# Org admin and super admin tooling
router.include_router(team.router, prefix="/team", tags=["Team"])
router.include_router(admin.router, prefix="/admin", tags=["Admin"])

# Tenant-scoped CRM data
router.include_router(contacts.router, prefix="/contacts", tags=["Contacts"])
router.include_router(deals.router, prefix="/deals", tags=["Deals"])
router.include_router(activities.router, prefix="/activities", tags=["Activities"])
router.include_router(contract_router, prefix="/contract-templates", tags=["Templates"])
router.include_router(email_router, prefix="/email-templates", tags=["Templates"])


@router.get("/", tags=["API"])
async def api_root():
    """API root — returns version and available endpoints."""
    return {
        "api": "hotel-crm",
        "version": "0.1.0",
        "endpoints": [
            "/auth",
            "/organizations",
            "/organization/profile",
            "/team",
            "/admin",
            "/contacts",
            "/deals",
            "/activities",
            "/contract-templates",
            "/email-templates",
        ],
    }
