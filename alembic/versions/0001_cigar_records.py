"""create cigar record tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "cigar_records",
        sa.Column("key", sa.String(255), primary_key=True),
        sa.Column("product_name", sa.String(512), nullable=False),
        sa.Column("total_recognitions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("rating_sum", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("confidence_sum", sa.Float(), nullable=False, server_default="0"),
        sa.Column("confidence_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_confidence", sa.Float(), nullable=True),
        sa.Column("description_updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_recognized_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        "field_counters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("record_key", sa.String(255), sa.ForeignKey("cigar_records.key"), nullable=False),
        sa.Column("field", sa.String(64), nullable=False),
        sa.Column("value", sa.String(255), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
        sa.UniqueConstraint("record_key", "field", "value", name="uq_field_counters_value"),
    )

    op.create_table(
        "record_contributors",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("record_key", sa.String(255), sa.ForeignKey("cigar_records.key"), nullable=False),
        sa.Column("contributor_id", sa.String(255), nullable=False),
        sa.Column("contributor_name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("record_key", "contributor_id", name="uq_record_contributors_id"),
    )
    op.create_index(
        "idx_record_contributors_contributor_id",
        "record_contributors",
        ["contributor_id"],
    )


def downgrade() -> None:
    op.drop_index("idx_record_contributors_contributor_id", table_name="record_contributors")
    op.drop_table("record_contributors")
    op.drop_table("field_counters")
    op.drop_table("cigar_records")
