"""create canvas tables

Revision ID: 5c1e0a9d2b7f
Revises:
Create Date: 2026-10-18 09:12:44.301552

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5c1e0a9d2b7f"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the cell, daily quota and session activity tables."""
    op.create_table(
        "cell",
        sa.Column("x", sa.Integer(), nullable=False, autoincrement=False),
        sa.Column("y", sa.Integer(), nullable=False, autoincrement=False),
        sa.Column("color", sa.String(length=7), nullable=False),
        sa.Column("session_id", sa.Text(), nullable=False),
        sa.Column("ip", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("x", "y"),
    )
    op.create_index("ix_cell_session_id", "cell", ["session_id"])
    op.create_index("ix_cell_ip", "cell", ["ip"])

    op.create_table(
        "daily_quota",
        sa.Column("ip", sa.Text(), nullable=False),
        sa.Column("day", sa.String(length=10), nullable=False),
        sa.Column("claims", sa.Integer(), nullable=False),
        sa.CheckConstraint("claims >= 0", name="ck_daily_quota_claims"),
        sa.PrimaryKeyConstraint("ip", "day"),
    )

    op.create_table(
        "session_activity",
        sa.Column("session_id", sa.Text(), nullable=False),
        sa.Column("ip", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("session_id"),
    )
    op.create_index(
        "ix_session_activity_last_activity", "session_activity", ["last_activity"]
    )


def downgrade() -> None:
    """Drop the canvas tables."""
    op.drop_index("ix_session_activity_last_activity", table_name="session_activity")
    op.drop_table("session_activity")
    op.drop_table("daily_quota")
    op.drop_index("ix_cell_ip", table_name="cell")
    op.drop_index("ix_cell_session_id", table_name="cell")
    op.drop_table("cell")
