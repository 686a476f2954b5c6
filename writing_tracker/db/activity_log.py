"""
activity_log.py - Queries for the raw activity tables

Provides insert/fetch functions for:
- profiles
- activity_submissions
- collaborative_activity_completions
- submissions
- point_rewards
"""

from typing import Any, Dict, List, Optional

from writing_tracker.models.tracking import utc_now_iso


def _row_to_dict(row) -> Dict[str, Any]:
    return {k: row[k] for k in row.keys()}


def _student_filter(column: str, student_ids: Optional[List[str]]) -> tuple[str, tuple]:
    if not student_ids:
        return "", ()
    placeholders = ", ".join("?" for _ in student_ids)
    return f" WHERE {column} IN ({placeholders})", tuple(student_ids)


# ══════════════════════════════════════════════════════════════════════════════
# PROFILES
# ══════════════════════════════════════════════════════════════════════════════

async def upsert_profile(
    db,
    profile_id: str,
    username: Optional[str] = None,
    full_name: Optional[str] = None,
    role: str = "student",
) -> None:
    await db.execute(
        """INSERT INTO profiles (id, username, full_name, role, created_at)
           VALUES (?, ?, ?, ?, ?)
           ON CONFLICT (id) DO UPDATE SET
               username = excluded.username,
               full_name = excluded.full_name,
               role = excluded.role""",
        (profile_id, username, full_name, role, utc_now_iso()),
    )
    await db.commit()


async def get_students(db) -> List[Dict[str, Any]]:
    cursor = await db.execute(
        "SELECT id, username, full_name, role FROM profiles WHERE role = 'student' ORDER BY username"
    )
    rows = await cursor.fetchall()
    return [_row_to_dict(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════════════
# ACTIVITY SUBMISSIONS
# ══════════════════════════════════════════════════════════════════════════════

async def upsert_activity_submission(
    db,
    student_id: str,
    topic_id: str,
    activity_id: int,
    response_text: Optional[str] = None,
) -> None:
    """Store (or resubmit) one activity answer; one row per student/topic/activity."""
    now = utc_now_iso()
    await db.execute(
        """INSERT INTO activity_submissions
           (student_id, topic_id, activity_id, response_text, status, created_at, updated_at)
           VALUES (?, ?, ?, ?, 'submitted', ?, ?)
           ON CONFLICT (student_id, topic_id, activity_id) DO UPDATE SET
               response_text = excluded.response_text,
               status = excluded.status,
               updated_at = excluded.updated_at""",
        (student_id, topic_id, activity_id, response_text, now, now),
    )
    await db.commit()


async def get_activity_submissions(db, student_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    where, params = _student_filter("student_id", student_ids)
    cursor = await db.execute(
        "SELECT student_id, topic_id, activity_id, status FROM activity_submissions" + where,
        params,
    )
    rows = await cursor.fetchall()
    return [_row_to_dict(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════════════
# COLLABORATIVE COMPLETIONS
# ══════════════════════════════════════════════════════════════════════════════

async def has_collaborative_completion(db, student_id: str, topic_id: str, activity_kind: str) -> bool:
    cursor = await db.execute(
        """SELECT id FROM collaborative_activity_completions
           WHERE student_id = ? AND topic_id = ? AND activity_kind = ?""",
        (student_id, topic_id, activity_kind),
    )
    return await cursor.fetchone() is not None


async def insert_collaborative_completion(db, student_id: str, topic_id: str, activity_kind: str) -> None:
    await db.execute(
        """INSERT INTO collaborative_activity_completions (student_id, topic_id, activity_kind, created_at)
           VALUES (?, ?, ?, ?)
           ON CONFLICT (student_id, topic_id, activity_kind) DO NOTHING""",
        (student_id, topic_id, activity_kind, utc_now_iso()),
    )
    await db.commit()


async def get_collaborative_completions(db, student_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    where, params = _student_filter("student_id", student_ids)
    cursor = await db.execute(
        "SELECT student_id, topic_id, activity_kind FROM collaborative_activity_completions" + where,
        params,
    )
    rows = await cursor.fetchall()
    return [_row_to_dict(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════════════
# WRITING SUBMISSIONS
# ══════════════════════════════════════════════════════════════════════════════

async def insert_submission(
    db,
    student_id: str,
    topic_title: Optional[str],
    submission_text: str,
    ai_grade: Optional[float] = None,
) -> int:
    cursor = await db.execute(
        """INSERT INTO submissions (student_id, topic_title, submission_text, ai_grade, created_at)
           VALUES (?, ?, ?, ?, ?)""",
        (student_id, topic_title, submission_text, ai_grade, utc_now_iso()),
    )
    await db.commit()
    return cursor.lastrowid


async def get_submissions(db, student_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    where, params = _student_filter("student_id", student_ids)
    cursor = await db.execute(
        "SELECT id, student_id, topic_title, ai_grade FROM submissions" + where,
        params,
    )
    rows = await cursor.fetchall()
    return [_row_to_dict(r) for r in rows]


# ══════════════════════════════════════════════════════════════════════════════
# POINT REWARDS
# ══════════════════════════════════════════════════════════════════════════════

async def get_point_rewards(db) -> List[Dict[str, Any]]:
    """Reward levels, highest threshold first."""
    cursor = await db.execute(
        "SELECT title, min_points FROM point_rewards ORDER BY min_points DESC"
    )
    rows = await cursor.fetchall()
    return [_row_to_dict(r) for r in rows]
