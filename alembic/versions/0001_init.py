"""asset catalog, form templates and rules

Revision ID: 0001_init
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _descriptor_columns() -> list[sa.Column]:
    return [
        sa.Column("field_key", sa.String(length=50), nullable=False),
        sa.Column("label", sa.String(length=100), nullable=False),
        sa.Column("field_type", sa.String(length=30), nullable=False, server_default="text"),
        sa.Column("is_required", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_readonly", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("default_value", sa.String(length=255), nullable=True),
        sa.Column("help_text", sa.Text(), nullable=True),
        sa.Column("placeholder", sa.String(length=255), nullable=True),
        sa.Column("options", sa.JSON(), nullable=True),
        sa.Column("validation_rules", sa.JSON(), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default=sa.text("0")),
    ]


def upgrade() -> None:
    op.create_table(
        "asset_types",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(length=80), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Draft"),
    )

    op.create_table(
        "asset_type_fields",
        *_base_columns(),
        sa.Column("asset_type_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_descriptor_columns(),
        sa.UniqueConstraint("asset_type_id", "field_key", name="uq_asset_type_fields_type_key"),
    )
    op.create_index(op.f("ix_asset_type_fields_asset_type_id"), "asset_type_fields", ["asset_type_id"], unique=False)
    op.create_index(op.f("ix_asset_type_fields_field_key"), "asset_type_fields", ["field_key"], unique=False)

    op.create_table(
        "form_definitions",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("asset_type_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Draft"),
    )
    op.create_index(op.f("ix_form_definitions_asset_type_id"), "form_definitions", ["asset_type_id"], unique=False)
    op.create_index(op.f("ix_form_definitions_is_published"), "form_definitions", ["is_published"], unique=False)

    op.create_table(
        "form_fields",
        *_base_columns(),
        sa.Column("form_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_descriptor_columns(),
        sa.Column("is_visible", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_system_field", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("column_span", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("section", sa.String(length=100), nullable=True),
        sa.Column("tab", sa.String(length=50), nullable=False, server_default="general"),
        sa.UniqueConstraint("form_id", "field_key", name="uq_form_fields_form_key"),
    )
    op.create_index(op.f("ix_form_fields_form_id"), "form_fields", ["form_id"], unique=False)
    op.create_index(op.f("ix_form_fields_field_key"), "form_fields", ["field_key"], unique=False)

    op.create_table(
        "form_rules",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("form_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("conditions", sa.JSON(), nullable=False, server_default=sa.text("'[]'::json")),
        sa.Column("actions", sa.JSON(), nullable=False, server_default=sa.text("'[]'::json")),
        sa.Column("is_enabled", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index(op.f("ix_form_rules_form_id"), "form_rules", ["form_id"], unique=False)

    op.create_table(
        "assets",
        *_base_columns(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("asset_type_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("parent_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("form_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("hierarchy_level", sa.String(length=20), nullable=False, server_default="Unit"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        sa.Column("criticality", sa.String(length=10), nullable=False, server_default="Medium"),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("data", sa.JSON(), nullable=False, server_default=sa.text("'{}'::json")),
    )
    op.create_index(op.f("ix_assets_name"), "assets", ["name"], unique=False)
    op.create_index(op.f("ix_assets_asset_type_id"), "assets", ["asset_type_id"], unique=False)
    op.create_index(op.f("ix_assets_parent_id"), "assets", ["parent_id"], unique=False)
    op.create_index(op.f("ix_assets_form_id"), "assets", ["form_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_assets_form_id"), table_name="assets")
    op.drop_index(op.f("ix_assets_parent_id"), table_name="assets")
    op.drop_index(op.f("ix_assets_asset_type_id"), table_name="assets")
    op.drop_index(op.f("ix_assets_name"), table_name="assets")
    op.drop_table("assets")

    op.drop_index(op.f("ix_form_rules_form_id"), table_name="form_rules")
    op.drop_table("form_rules")

    op.drop_index(op.f("ix_form_fields_field_key"), table_name="form_fields")
    op.drop_index(op.f("ix_form_fields_form_id"), table_name="form_fields")
    op.drop_table("form_fields")

    op.drop_index(op.f("ix_form_definitions_is_published"), table_name="form_definitions")
    op.drop_index(op.f("ix_form_definitions_asset_type_id"), table_name="form_definitions")
    op.drop_table("form_definitions")

    op.drop_index(op.f("ix_asset_type_fields_field_key"), table_name="asset_type_fields")
    op.drop_index(op.f("ix_asset_type_fields_asset_type_id"), table_name="asset_type_fields")
    op.drop_table("asset_type_fields")

    op.drop_table("asset_types")
