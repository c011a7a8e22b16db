"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- ENUM types ---
    habit_frequency_enum = postgresql.ENUM(
        "daily", "weekly", "monthly", name="habit_frequency_enum"
    )
    habit_frequency_enum.create(op.get_bind(), checkfirst=True)

    habit_difficulty_enum = postgresql.ENUM(
        "easy", "medium", "hard", name="habit_difficulty_enum"
    )
    habit_difficulty_enum.create(op.get_bind(), checkfirst=True)

    # --- habits ---
    op.create_table(
        "habits",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("frequency", postgresql.ENUM(
            "daily", "weekly", "monthly", name="habit_frequency_enum", create_type=False
        ), nullable=False),
        sa.Column("difficulty", postgresql.ENUM(
            "easy", "medium", "hard", name="habit_difficulty_enum", create_type=False
        ), nullable=False),
        sa.Column("time_of_day", sa.String(32), nullable=True),
        sa.Column("category", sa.String(64), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("completion_history", sa.JSON(), nullable=False),
        sa.Column("streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("streak_current", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("streak_longest", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("streak_last_completed", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_habits_id", "habits", ["id"])
    op.create_index("ix_habits_user_id", "habits", ["user_id"])
    op.create_index("ix_habits_frequency", "habits", ["frequency"])
    op.create_index("ix_habits_streak_current", "habits", ["streak_current"])

    # --- productivity_metrics ---
    op.create_table(
        "productivity_metrics",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("tasks_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("tasks_created", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("habits_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("habit_completion_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("focus_time", sa.Integer(), nullable=False, server_default="0",
                  comment="Minutes of focused work."),
        sa.Column("productivity_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("day_rating", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "day", name="uq_productivity_user_day"),
    )
    op.create_index("ix_productivity_metrics_id", "productivity_metrics", ["id"])
    op.create_index("ix_productivity_metrics_user_id", "productivity_metrics", ["user_id"])
    op.create_index("ix_productivity_metrics_day", "productivity_metrics", ["day"])


def downgrade() -> None:
    op.drop_index("ix_productivity_metrics_day", table_name="productivity_metrics")
    op.drop_index("ix_productivity_metrics_user_id", table_name="productivity_metrics")
    op.drop_index("ix_productivity_metrics_id", table_name="productivity_metrics")
    op.drop_table("productivity_metrics")

    op.drop_index("ix_habits_streak_current", table_name="habits")
    op.drop_index("ix_habits_frequency", table_name="habits")
    op.drop_index("ix_habits_user_id", table_name="habits")
    op.drop_index("ix_habits_id", table_name="habits")
    op.drop_table("habits")

    postgresql.ENUM(name="habit_difficulty_enum").drop(op.get_bind(), checkfirst=True)
    postgresql.ENUM(name="habit_frequency_enum").drop(op.get_bind(), checkfirst=True)
