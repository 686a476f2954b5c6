"""
tracking_store.py - Persistence for per-student tracking records

The store exposes exactly three operations:
- fetch_one(student_id)        -> StudentTrackingRecord or None
- upsert(student_id, record)   -> insert-or-replace keyed by student id
- fetch_all()                  -> every stored record

A stored record that cannot be decoded raises ValueError from fetch_one, so
callers treat it like any other read failure.
"""

import json
import logging
from typing import Any, Optional

from writing_tracker.models.tracking import StudentTrackingRecord, TrackingRow, utc_now_iso

logger = logging.getLogger(__name__)


def _parse_tracking_data(raw: Any) -> StudentTrackingRecord:
    if raw is None or raw == "":
        return StudentTrackingRecord()
    data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    return StudentTrackingRecord.model_validate(data or {})


class TrackingStore:
    """student_tracking table access over an aiosqlite or PgConnection handle."""

    def __init__(self, db):
        self._db = db

    async def fetch_one(self, student_id: str) -> Optional[StudentTrackingRecord]:
        cursor = await self._db.execute(
            "SELECT tracking_data FROM student_tracking WHERE student_id = ?",
            (student_id,),
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return _parse_tracking_data(row["tracking_data"])

    async def upsert(
        self,
        student_id: str,
        record: StudentTrackingRecord,
        student_name: Optional[str] = None,
    ) -> None:
        now = utc_now_iso()
        await self._db.execute(
            """INSERT INTO student_tracking (student_id, student_name, tracking_data, created_at, updated_at)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT (student_id) DO UPDATE SET
                   tracking_data = excluded.tracking_data,
                   student_name = COALESCE(excluded.student_name, student_tracking.student_name),
                   updated_at = excluded.updated_at""",
            (student_id, student_name, json.dumps(record.to_storage(), ensure_ascii=False), now, now),
        )
        await self._db.commit()

    async def fetch_all(self) -> list[TrackingRow]:
        cursor = await self._db.execute(
            "SELECT student_id, student_name, tracking_data FROM student_tracking ORDER BY student_id"
        )
        rows = await cursor.fetchall()
        result = []
        for r in rows:
            try:
                record = _parse_tracking_data(r["tracking_data"])
            except ValueError as exc:
                logger.warning("Undecodable tracking data for student %s: %s", r["student_id"], exc)
                record = None
            result.append(TrackingRow(student_id=r["student_id"], student_name=r["student_name"], record=record))
        return result
