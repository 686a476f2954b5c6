"""tracking_schema_baseline

Creates the tracking tables from writing_tracker/db/schema.sql.

Revision ID: 3b9d2c7e41a5
Revises:
Create Date: 2026-10-12

"""
from typing import Sequence, Union
from pathlib import Path

from alembic import op
import sqlalchemy as sa


revision: str = "3b9d2c7e41a5"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _adapt_sql(sql: str, dialect_name: str) -> str:
    """Adapt DDL for the target database dialect."""
    if dialect_name == "postgresql":
        sql = sql.replace("INTEGER PRIMARY KEY AUTOINCREMENT", "SERIAL PRIMARY KEY")
    return sql


def upgrade() -> None:
    """Create every table in schema.sql (CREATE TABLE IF NOT EXISTS)."""
    dialect_name = op.get_bind().dialect.name

    schema_path = Path(__file__).resolve().parents[2] / "writing_tracker" / "db" / "schema.sql"
    schema_sql = schema_path.read_text(encoding="utf-8")
    # op.execute runs one statement at a time
    for statement in schema_sql.split(";"):
        lines = [
            line for line in statement.splitlines()
            if line.strip() and not line.strip().startswith("--")
        ]
        cleaned = "\n".join(lines).strip()
        if cleaned:
            op.execute(sa.text(_adapt_sql(cleaned, dialect_name)))


def downgrade() -> None:
    tables = [
        "tracking_confirmations",
        "session_durations",
        "point_rewards",
        "submissions",
        "collaborative_activity_completions",
        "activity_submissions",
        "student_tracking",
        "profiles",
    ]
    for table in tables:
        op.drop_table(table)
