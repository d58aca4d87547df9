"""Initial schema: credentials, organizations, the three resource tables, requests.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 10:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RESOURCE_TABLES = ["medicines", "rations", "articles"]


def _resource_columns() -> list[sa.Column]:
    """Bookkeeping columns shared by every resource table."""
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="available"),
        sa.Column("photo_base64", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.Text(), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )

    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("cnpj", sa.Text(), nullable=False),
        sa.Column("city", sa.Text(), nullable=False),
        sa.Column("state", sa.Text(), nullable=False),
        sa.Column("contact_email", sa.Text(), nullable=False, unique=True),
        sa.Column("contact_phone", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.Column("owner_user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status IN ('pending', 'verified', 'rejected')", name="ck_organizations_status"),
    )
    op.create_index("idx_organizations_state", "organizations", ["state"])

    op.create_table(
        "medicines",
        *_resource_columns(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("active_ingredient", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Text(), nullable=False),
        sa.Column("expiration_date", sa.Date(), nullable=False),
    )

    op.create_table(
        "rations",
        *_resource_columns(),
        sa.Column("brand", sa.Text(), nullable=False),
        sa.Column("quantity_kg", sa.Float(), nullable=False),
        sa.Column("expiration_date", sa.Date(), nullable=False),
        sa.CheckConstraint("quantity_kg > 0", name="ck_rations_quantity_kg"),
    )

    op.create_table(
        "articles",
        *_resource_columns(),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("condition", sa.Text(), nullable=False),
        sa.Column("size_specification", sa.Text(), nullable=True),
        sa.CheckConstraint(
            "category IN ('collars_and_leashes', 'accessories', 'hygiene', 'others')",
            name="ck_articles_category",
        ),
        sa.CheckConstraint("condition IN ('new', 'used')", name="ck_articles_condition"),
        sa.CheckConstraint("quantity >= 1", name="ck_articles_quantity"),
    )

    for table in RESOURCE_TABLES:
        op.create_check_constraint(
            f"ck_{table}_status", table, "status IN ('available', 'requested', 'donated')"
        )
        op.create_index(f"idx_{table}_org", table, ["organization_id"])
        op.create_index(f"idx_{table}_status", table, ["status"])

    # resource_id has no FK: it points into the table named by resource_type
    op.create_table(
        "resource_requests",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("resource_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("resource_type", sa.Text(), nullable=False),
        sa.Column("donating_organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("requesting_organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        sa.CheckConstraint(
            "resource_type IN ('medicines', 'rations', 'articles')", name="ck_resource_requests_type"
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')", name="ck_resource_requests_status"
        ),
    )
    op.create_index("idx_resource_requests_donor", "resource_requests", ["donating_organization_id", "status"])
    op.create_index("idx_resource_requests_requester", "resource_requests", ["requesting_organization_id"])
    op.create_index("idx_resource_requests_resource", "resource_requests", ["resource_type", "resource_id"])


def downgrade() -> None:
    op.drop_table("resource_requests")
    for table in reversed(RESOURCE_TABLES):
        op.drop_table(table)
    op.drop_table("organizations")
    op.drop_table("users")
