"""create beneficiaries, mapping_configs and import_runs tables

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


def upgrade() -> None:
    op.create_table(
        "beneficiaries",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("first_name", sa.String(length=120), nullable=True),
        sa.Column("last_name", sa.String(length=120), nullable=True),
        sa.Column("nationality", sa.String(length=120), nullable=True),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=32), nullable=True),
        sa.Column("blood_type", sa.String(length=16), nullable=True),
        sa.Column(
            "identity_number",
            sa.String(length=64),
            nullable=True,
            comment="National identity or passport number",
        ),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("mobile_phone", sa.String(length=40), nullable=True),
        sa.Column("landline_phone", sa.String(length=40), nullable=True),
        sa.Column("foreign_phone", sa.String(length=40), nullable=True),
        sa.Column("country", sa.String(length=120), nullable=True),
        sa.Column("city", sa.String(length=120), nullable=True),
        sa.Column("district", sa.String(length=120), nullable=True),
        sa.Column("neighborhood", sa.String(length=120), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("iban", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_beneficiaries"),
        sa.UniqueConstraint("identity_number", name="uq_beneficiaries_identity_number"),
    )
    op.create_index(
        "ix_beneficiaries_last_name_first_name",
        "beneficiaries",
        ["last_name", "first_name"],
        unique=False,
    )
    op.create_index("ix_beneficiaries_city", "beneficiaries", ["city"], unique=False)

    op.create_table(
        "mapping_configs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("organization", sa.String(length=255), nullable=True),
        sa.Column("field_mapping_json", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("alias_overrides_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("metadata_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_mapping_configs"),
        sa.UniqueConstraint("name", "organization", name="uq_mapping_configs_name_organization"),
    )
    op.create_index("ix_mapping_configs_name", "mapping_configs", ["name"], unique=False)
    op.create_index("ix_mapping_configs_organization", "mapping_configs", ["organization"], unique=False)
    op.create_index("ix_mapping_configs_is_active", "mapping_configs", ["is_active"], unique=False)

    op.create_table(
        "import_runs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("filename", sa.String(length=255), nullable=True),
        sa.Column("delimiter", sa.String(length=8), nullable=True),
        sa.Column("total_rows", sa.Integer(), nullable=False),
        sa.Column("validated_rows", sa.Integer(), nullable=False),
        sa.Column("rejected_rows", sa.Integer(), nullable=False),
        sa.Column("inserted_rows", sa.Integer(), nullable=False),
        sa.Column("field_mapping_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("report_json", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_import_runs"),
    )
    op.create_index("ix_import_runs_status", "import_runs", ["status"], unique=False)
    op.create_index("ix_import_runs_created_at", "import_runs", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_import_runs_created_at", table_name="import_runs")
    op.drop_index("ix_import_runs_status", table_name="import_runs")
    op.drop_table("import_runs")
    op.drop_index("ix_mapping_configs_is_active", table_name="mapping_configs")
    op.drop_index("ix_mapping_configs_organization", table_name="mapping_configs")
    op.drop_index("ix_mapping_configs_name", table_name="mapping_configs")
    op.drop_table("mapping_configs")
    op.drop_index("ix_beneficiaries_city", table_name="beneficiaries")
    op.drop_index("ix_beneficiaries_last_name_first_name", table_name="beneficiaries")
    op.drop_table("beneficiaries")
