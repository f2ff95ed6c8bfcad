"""Initial hotel CRM schema: tenancy core plus tenant-scoped CRM tables.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Tenant-scoped tables, in creation order.
TENANT_TABLES = [
    "contacts",
    "deals",
    "activities",
    "contract_templates",
    "email_templates",
]


def _uuid() -> postgresql.UUID:
    return postgresql.UUID(as_uuid=True)


def _now() -> sa.TextClause:
    return sa.text("now()")


# ---------------------------------------------------------------------------
# UPGRADE
# ---------------------------------------------------------------------------


def upgrade() -> None:
    # -----------------------------------------------------------------------
    # 1. Tenancy core
    # -----------------------------------------------------------------------

    # organizations (the tenant boundary; active=false means archived)
    op.create_table(
        "organizations",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.Text(), nullable=True),
        sa.Column("country", sa.Text(), nullable=True),
        sa.Column("phone", sa.Text(), nullable=True),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("room_count", sa.Integer(), nullable=True),
        sa.Column("meeting_space_sqft", sa.Integer(), nullable=True),
        sa.Column("profile", postgresql.JSONB(), nullable=False, server_default="{}"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index("idx_organizations_name", "organizations", ["name"])
    op.create_index("idx_organizations_active", "organizations", ["active"])

    # users
    op.create_table(
        "users",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=True, unique=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("birthday", sa.Date(), nullable=True),
        sa.Column("password_hash", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="user"),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=True),
        sa.Column("current_organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=True),
        sa.Column("auth_provider", sa.Text(), nullable=False, server_default="email"),
        sa.Column("google_id", sa.Text(), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index("idx_users_organization", "users", ["organization_id"])

    # user_organizations (membership; composite key = one row per user and org)
    op.create_table(
        "user_organizations",
        sa.Column("user_id", _uuid(), sa.ForeignKey("users.id"), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), primary_key=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="user"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index("idx_user_organizations_org", "user_organizations", ["organization_id"])

    # invitations (organization_id null = invitee onboards their own hotel)
    op.create_table(
        "invitations",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="user"),
        sa.Column("invited_by", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("idx_invitations_email_status", "invitations", ["email", "status"])
    op.create_index("idx_invitations_org", "invitations", ["organization_id"])

    # -----------------------------------------------------------------------
    # 2. Tenant-scoped CRM data
    # -----------------------------------------------------------------------

    op.create_table(
        "contacts",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False, server_default=""),
        sa.Column("company", sa.Text(), nullable=False, server_default=""),
        sa.Column("company_website", sa.Text(), nullable=True),
        sa.Column("status", sa.Text(), nullable=False, server_default="new"),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_by", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )

    op.create_table(
        "deals",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("contact_id", _uuid(), sa.ForeignKey("contacts.id"), nullable=True),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("value", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("stage", sa.Text(), nullable=False, server_default="lead"),
        sa.Column("probability", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("expected_close_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index("idx_deals_contact", "deals", ["contact_id"])
    op.create_index("idx_deals_stage", "deals", ["organization_id", "stage"])

    op.create_table(
        "activities",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("contact_id", _uuid(), sa.ForeignKey("contacts.id"), nullable=True),
        sa.Column("deal_id", _uuid(), sa.ForeignKey("deals.id"), nullable=True),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_by", _uuid(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )
    op.create_index("idx_activities_contact", "activities", ["contact_id"])
    op.create_index("idx_activities_deal", "activities", ["deal_id"])

    op.create_table(
        "contract_templates",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("type", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )

    op.create_table(
        "email_templates",
        sa.Column("id", _uuid(), primary_key=True),
        sa.Column("organization_id", _uuid(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("subject", sa.Text(), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=_now()),
    )

    for table in TENANT_TABLES:
        op.create_index(f"idx_{table}_org", table, ["organization_id"])


# ---------------------------------------------------------------------------
# DOWNGRADE
# ---------------------------------------------------------------------------


def downgrade() -> None:
    for table in reversed(TENANT_TABLES):
        op.drop_table(table)

    op.drop_table("invitations")
    op.drop_table("user_organizations")
    op.drop_table("users")
    op.drop_table("organizations")
