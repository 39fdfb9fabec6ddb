"""create organizations, users, points_imports and points_history tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cnpj", sa.String(length=18), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, comment="Soft-disable a tenant without deletion"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cnpj"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index("ix_organizations_is_active", "organizations", ["is_active"], unique=False)

    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("cpf", sa.String(length=14), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            nullable=True,
            comment="Null for platform administrators",
        ),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("first_access", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("points >= 0", name="ck_users_points_non_negative"),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("cpf"),
    )
    op.create_index("ix_users_organization_id", "users", ["organization_id"], unique=False)
    op.create_index("ix_users_email", "users", ["email"], unique=False)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "points_imports",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("total_records", sa.Integer(), nullable=False),
        sa.Column("success_records", sa.Integer(), nullable=False),
        sa.Column("error_records", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, comment="PROCESSING, COMPLETED, PARTIAL, ERROR"),
        sa.Column(
            "error_details",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=True,
            comment="Row-level errors: [{row, cpf, error}]",
        ),
        sa.Column("error_message", sa.Text(), nullable=True, comment="Job-level failure that aborted processing"),
        sa.Column("imported_by", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("file_checksum", sa.String(length=64), nullable=True, comment="sha256 of the uploaded bytes"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_points_imports_organization_id", "points_imports", ["organization_id"], unique=False)
    op.create_index("ix_points_imports_status", "points_imports", ["status"], unique=False)
    op.create_index("ix_points_imports_created_at", "points_imports", ["created_at"], unique=False)
    op.create_index(
        "ix_points_imports_org_checksum",
        "points_imports",
        ["organization_id", "file_checksum"],
        unique=False,
    )

    op.create_table(
        "points_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("account_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("points_added", sa.Integer(), nullable=False),
        sa.Column("source_description", sa.String(length=255), nullable=False),
        sa.Column("points_import_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["account_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["points_import_id"], ["points_imports.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_points_history_account_id", "points_history", ["account_id"], unique=False)
    op.create_index("ix_points_history_points_import_id", "points_history", ["points_import_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_points_history_points_import_id", table_name="points_history")
    op.drop_index("ix_points_history_account_id", table_name="points_history")
    op.drop_table("points_history")

    op.drop_index("ix_points_imports_org_checksum", table_name="points_imports")
    op.drop_index("ix_points_imports_created_at", table_name="points_imports")
    op.drop_index("ix_points_imports_status", table_name="points_imports")
    op.drop_index("ix_points_imports_organization_id", table_name="points_imports")
    op.drop_table("points_imports")

    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_organization_id", table_name="users")
    op.drop_table("users")

    op.drop_index("ix_organizations_is_active", table_name="organizations")
    op.drop_table("organizations")
