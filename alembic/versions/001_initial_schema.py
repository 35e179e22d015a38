"""Initial schema: users, experiments and the experiments bank.

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # -- Foundation --
    op.create_table(
        "users",
        sa.Column("user_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
    )

    # -- Experiments (OPERATIONAL) --
    op.create_table(
        "experiments",
        sa.Column("experiment_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True),
                  sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ph", sa.Float, nullable=True),
        sa.Column("tds", sa.Float, nullable=True),
        sa.Column("turbidity", sa.Float, nullable=True),
        sa.Column("summary", sa.Text, nullable=True),
        sa.Column("solution", sa.Text, nullable=True),
        sa.Column("similarity_analysis", sa.Text, nullable=True),
    )
    op.create_index("ix_experiments_user_id", "experiments", ["user_id"])

    # -- Historical bank (REFERENCE) --
    op.create_table(
        "experiments_bank",
        sa.Column("sample_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("date", sa.Date, nullable=True),
        sa.Column("time", sa.Time, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("turbidity", sa.Float, nullable=True),
        sa.Column("tds", sa.Float, nullable=True),
        sa.Column("ph", sa.Float, nullable=True),
    )


def downgrade() -> None:
    op.drop_table("experiments_bank")
    op.drop_index("ix_experiments_user_id", table_name="experiments")
    op.drop_table("experiments")
    op.drop_table("users")
