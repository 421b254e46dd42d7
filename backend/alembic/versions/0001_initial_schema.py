"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates the users and timers tables, including the partial unique index
that allows at most one main timer per owner.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- timers ---
    op.create_table(
        "timers",
        sa.Column("timer_id", sa.String(36), primary_key=True),
        sa.Column(
            "owner_id", sa.String(36),
            sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("event_name", sa.String(255), nullable=False),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_main_display", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("share_id", sa.String(36), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_timers_owner_event_date", "timers", ["owner_id", "event_date"])
    op.create_index(
        "uq_timers_one_main_per_owner",
        "timers",
        ["owner_id"],
        unique=True,
        postgresql_where=sa.text("is_main_display"),
        sqlite_where=sa.text("is_main_display = 1"),
    )


def downgrade() -> None:
    op.drop_index("uq_timers_one_main_per_owner", table_name="timers")
    op.drop_index("ix_timers_owner_event_date", table_name="timers")
    op.drop_table("timers")
    op.drop_table("users")
