"""add_student_lookup_indexes

Indexes on the per-student lookups used by the leaderboard and the
session timer.

Revision ID: 8e14f0a6c2d3
Revises: 3b9d2c7e41a5
Create Date: 2026-10-12

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "8e14f0a6c2d3"
down_revision: Union[str, Sequence[str], None] = "3b9d2c7e41a5"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute(sa.text(
        "CREATE INDEX IF NOT EXISTS idx_submissions_student "
        "ON submissions(student_id)"
    ))
    op.execute(sa.text(
        "CREATE INDEX IF NOT EXISTS idx_session_durations_student "
        "ON session_durations(student_id, topic_id)"
    ))
    op.execute(sa.text(
        "CREATE INDEX IF NOT EXISTS idx_tracking_confirmations_student "
        "ON tracking_confirmations(student_id, is_confirmed)"
    ))
    op.execute(sa.text(
        "CREATE INDEX IF NOT EXISTS idx_profiles_role "
        "ON profiles(role)"
    ))


def downgrade() -> None:
    op.execute(sa.text("DROP INDEX IF EXISTS idx_profiles_role"))
    op.execute(sa.text("DROP INDEX IF EXISTS idx_tracking_confirmations_student"))
    op.execute(sa.text("DROP INDEX IF EXISTS idx_session_durations_student"))
    op.execute(sa.text("DROP INDEX IF EXISTS idx_submissions_student"))
