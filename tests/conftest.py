import asyncio
import os
import sqlite3

# Settings validate ADMIN_SECRET at import time
os.environ.setdefault("ADMIN_SECRET", "test-admin-secret-0123456789")

import pytest

from writing_tracker.config import settings
from writing_tracker.db.database import SCHEMA_PATH
from writing_tracker.models.tracking import StudentTrackingRecord, TrackingRow

ADMIN_SECRET = os.environ["ADMIN_SECRET"]


class FakeTrackingStore:
    """In-memory fetch_one / upsert / fetch_all with per-student failure switches."""

    def __init__(self, records=None):
        self.records = {
            student_id: StudentTrackingRecord.model_validate(data) if isinstance(data, dict) else data
            for student_id, data in (records or {}).items()
        }
        self.fail_fetch = set()
        self.fail_upsert = set()
        self.fail_fetch_all = False
        self.writes = []

    async def fetch_one(self, student_id):
        # yield to the loop so concurrent callers can interleave
        await asyncio.sleep(0)
        if student_id in self.fail_fetch:
            raise RuntimeError(f"fetch failed for {student_id}")
        record = self.records.get(student_id)
        return record.model_copy(deep=True) if record is not None else None

    async def upsert(self, student_id, record):
        await asyncio.sleep(0)
        if student_id in self.fail_upsert:
            raise RuntimeError(f"upsert failed for {student_id}")
        self.records[student_id] = record.model_copy(deep=True)
        self.writes.append(student_id)

    async def fetch_all(self):
        if self.fail_fetch_all:
            raise RuntimeError("fetch_all failed")
        return [
            TrackingRow(student_id=student_id, record=record.model_copy(deep=True))
            for student_id, record in sorted(self.records.items())
        ]


@pytest.fixture
def fake_store():
    return FakeTrackingStore()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """A SQLite file with the full schema, wired in as the configured database."""
    path = str(tmp_path / "writing_tracker_test.db")
    conn = sqlite3.connect(path)
    conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
    conn.commit()
    conn.close()
    monkeypatch.setattr(settings, "database_path", path)
    monkeypatch.setattr(settings, "database_url", "")
    return path
