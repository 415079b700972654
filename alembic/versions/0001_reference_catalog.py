"""reference catalog and logical analyses

Revision ID: 0001_reference_catalog
Revises:
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001_reference_catalog"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "biomarkers_reference",
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("unit", sa.String(length=50), nullable=True),
        sa.Column("optimal_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("optimal_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("lab_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("lab_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("clinical_insight", sa.Text(), nullable=True),
        sa.Column("metaphor", sa.Text(), nullable=True),
        sa.Column("source_ref", sa.String(length=200), nullable=True),
        sa.Column("common_aliases", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("slug"),
    )
    op.create_index("ix_biomarkers_reference_category", "biomarkers_reference", ["category"], unique=False)

    op.create_table(
        "calculated_metrics",
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("formula", sa.String(length=500), nullable=False),
        sa.Column("target_min", sa.Numeric(10, 2), nullable=True),
        sa.Column("target_max", sa.Numeric(10, 2), nullable=True),
        sa.Column("risk_insight", sa.Text(), nullable=True),
        sa.Column("source_ref", sa.String(length=200), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("slug"),
    )

    op.create_table(
        "protocols",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("trigger_condition", sa.String(length=500), nullable=False),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("dosage", sa.String(length=200), nullable=True),
        sa.Column("source_ref", sa.String(length=200), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "logical_analyses",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("document_set_key", sa.String(length=64), nullable=False),
        sa.Column("document_ids", sa.Text(), nullable=False),
        sa.Column("fact_base", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "document_set_key", name="uq_logical_analyses_user_docset"),
    )
    op.create_index("ix_logical_analyses_user_id", "logical_analyses", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_logical_analyses_user_id", table_name="logical_analyses")
    op.drop_table("logical_analyses")
    op.drop_table("protocols")
    op.drop_table("calculated_metrics")
    op.drop_index("ix_biomarkers_reference_category", table_name="biomarkers_reference")
    op.drop_table("biomarkers_reference")
