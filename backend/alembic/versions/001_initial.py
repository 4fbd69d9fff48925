"""Initial schema: leads, rent_roll

Revision ID: 001
Revises:
Create Date: 2025-01-01 00:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("organization", sa.String(), nullable=False),
        sa.Column("firstName", sa.String(), nullable=True),
        sa.Column("lastName", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("employees", sa.String(), nullable=True),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "employees IS NULL OR employees IN "
            "('2-10', '11-50', '51-200', '201-1000', '1001-5000', '5001-10000', '10001+')",
            name="ck_leads_employees_bracket",
        ),
        sa.CheckConstraint("rank IS NULL OR rank >= 1", name="ck_leads_rank_positive"),
    )
    op.create_index("ix_leads_user_id", "leads", ["user_id"])
    op.create_index("ix_leads_user_org", "leads", ["user_id", "organization"])

    op.create_table(
        "rent_roll",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("property", sa.String(), nullable=False),
        sa.Column("unit", sa.String(), nullable=True),
        sa.Column("tenant", sa.String(), nullable=True),
        sa.Column("lease_start", sa.String(), nullable=True),
        sa.Column("lease_end", sa.String(), nullable=True),
        sa.Column("sqft", sa.Float(), nullable=True),
        sa.Column("monthly_payment", sa.Float(), nullable=True),
        sa.Column(
            "invalid_columns",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_rent_roll_user_id", "rent_roll", ["user_id"])
    op.create_index("ix_rent_roll_user_property", "rent_roll", ["user_id", "property"])


def downgrade() -> None:
    op.drop_index("ix_rent_roll_user_property", table_name="rent_roll")
    op.drop_index("ix_rent_roll_user_id", table_name="rent_roll")
    op.drop_table("rent_roll")
    op.drop_index("ix_leads_user_org", table_name="leads")
    op.drop_index("ix_leads_user_id", table_name="leads")
    op.drop_table("leads")
