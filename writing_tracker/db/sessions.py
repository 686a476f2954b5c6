"""
sessions.py - Queries for session timing and tracking confirmations

Provides insert/fetch/update functions for:
- session_durations
- tracking_confirmations
"""

import json
from typing import Any, Dict, Optional

from writing_tracker.models.tracking import utc_now_iso


# ══════════════════════════════════════════════════════════════════════════════
# SESSION DURATIONS
# ══════════════════════════════════════════════════════════════════════════════

async def create_session_duration(
    db,
    student_id: str,
    topic_id: str,
    session_type: str,
    start_time: str,
) -> int:
    cursor = await db.execute(
        """INSERT INTO session_durations (student_id, topic_id, session_type, start_time)
           VALUES (?, ?, ?, ?)""",
        (student_id, topic_id, session_type, start_time),
    )
    await db.commit()
    return cursor.lastrowid


async def get_session_duration(db, session_id: int) -> Optional[Dict[str, Any]]:
    cursor = await db.execute(
        "SELECT * FROM session_durations WHERE id = ?",
        (session_id,),
    )
    row = await cursor.fetchone()
    if not row:
        return None
    return {k: row[k] for k in row.keys()}


async def complete_session_duration(db, session_id: int, end_time: str, duration_seconds: int) -> None:
    await db.execute(
        """UPDATE session_durations
           SET end_time = ?, duration_seconds = ?, is_completed = 1
           WHERE id = ?""",
        (end_time, duration_seconds, session_id),
    )
    await db.commit()


# ══════════════════════════════════════════════════════════════════════════════
# TRACKING CONFIRMATIONS
# ══════════════════════════════════════════════════════════════════════════════

async def create_tracking_confirmation(
    db,
    student_id: str,
    tracking_type: str,
    topic_id: str,
    activity_id: Optional[int] = None,
    confirmation_data: Optional[Dict[str, Any]] = None,
) -> int:
    """Insert an unconfirmed confirmation request. Returns the new row ID."""
    cursor = await db.execute(
        """INSERT INTO tracking_confirmations
           (student_id, tracking_type, topic_id, activity_id, confirmation_data, is_confirmed, created_at)
           VALUES (?, ?, ?, ?, ?, 0, ?)""",
        (
            student_id,
            tracking_type,
            topic_id,
            activity_id,
            json.dumps(confirmation_data, ensure_ascii=False) if confirmation_data is not None else None,
            utc_now_iso(),
        ),
    )
    await db.commit()
    return cursor.lastrowid


async def get_tracking_confirmation(db, confirmation_id: int) -> Optional[Dict[str, Any]]:
    cursor = await db.execute(
        "SELECT * FROM tracking_confirmations WHERE id = ?",
        (confirmation_id,),
    )
    row = await cursor.fetchone()
    if not row:
        return None
    result = {k: row[k] for k in row.keys()}
    if result.get("confirmation_data"):
        result["confirmation_data"] = json.loads(result["confirmation_data"])
    result["is_confirmed"] = bool(result.get("is_confirmed"))
    return result


async def mark_tracking_confirmed(db, confirmation_id: int) -> None:
    await db.execute(
        """UPDATE tracking_confirmations
           SET is_confirmed = 1, confirmation_timestamp = ?
           WHERE id = ?""",
        (utc_now_iso(), confirmation_id),
    )
    await db.commit()
