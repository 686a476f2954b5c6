"""Time spent by students in lesson, review, evaluation, activity and collaborative sessions."""

import logging
from datetime import datetime, timezone
from typing import Optional

from writing_tracker.db import sessions as session_db

logger = logging.getLogger(__name__)


async def start_session(
    db,
    student_id: str,
    topic_id: str,
    session_type: str,
    now: Optional[datetime] = None,
) -> Optional[int]:
    """Open a timed session. Returns its id, or None if it could not be stored."""
    start_time = (now or datetime.now(timezone.utc)).isoformat()
    try:
        return await session_db.create_session_duration(db, student_id, topic_id, session_type, start_time)
    except Exception as exc:
        logger.error("Error starting %s session for student %s: %s", session_type, student_id, exc)
        return None


async def end_session(db, session_id: int, now: Optional[datetime] = None) -> int:
    """Close a session and return its duration in whole seconds (0 if it cannot be closed)."""
    try:
        session = await session_db.get_session_duration(db, session_id)
    except Exception as exc:
        logger.error("Error reading session %s: %s", session_id, exc)
        return 0
    if session is None:
        logger.warning("Session %s not found", session_id)
        return 0
    if session["is_completed"]:
        logger.warning("Session %s already ended", session_id)
        return 0

    end_time = now or datetime.now(timezone.utc)
    try:
        start_time = datetime.fromisoformat(session["start_time"])
    except (TypeError, ValueError) as exc:
        logger.error("Session %s has an unreadable start time: %s", session_id, exc)
        return 0
    if start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)
    duration = max(0, int((end_time - start_time).total_seconds()))

    try:
        await session_db.complete_session_duration(db, session_id, end_time.isoformat(), duration)
    except Exception as exc:
        logger.error("Error saving session duration for session %s: %s", session_id, exc)
        return 0
    return duration
