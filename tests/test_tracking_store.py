"""Tests for the SQLite-backed tracking store, end to end with the recorders."""

import asyncio
import json

import pytest

from writing_tracker.db.database import connect
from writing_tracker.db.tracking_store import TrackingStore
from writing_tracker.models.tracking import StudentTrackingRecord
from writing_tracker.services.reconciler import (
    get_student_points,
    recalculate_all_student_points,
)
from writing_tracker.services.tracking import (
    track_activity_submission,
    track_collaborative_completion,
    track_lesson_completion,
)


async def _raw_tracking_data(db, student_id):
    cursor = await db.execute(
        "SELECT tracking_data FROM student_tracking WHERE student_id = ?", (student_id,)
    )
    row = await cursor.fetchone()
    return row["tracking_data"]


async def _insert_raw(db, student_id, tracking_data):
    await db.execute(
        "INSERT INTO student_tracking (student_id, tracking_data) VALUES (?, ?)",
        (student_id, tracking_data),
    )
    await db.commit()


class TestTrackingStore:

    def test_missing_student_is_none(self, db_path):
        async def go():
            async with connect() as db:
                return await TrackingStore(db).fetch_one("nobody")

        assert asyncio.run(go()) is None

    def test_upsert_round_trip_uses_stored_key_names(self, db_path):
        record = StudentTrackingRecord.model_validate({
            "lessons": {"t1": {"completed": True}},
            "activities": {"t1": {"completedIds": [0, 2]}},
            "points": {"total": 40},
        })

        async def go():
            async with connect() as db:
                store = TrackingStore(db)
                await store.upsert("s1", record, student_name="سارة")
                return await store.fetch_one("s1"), await _raw_tracking_data(db, "s1")

        loaded, raw = asyncio.run(go())

        assert loaded.activities["t1"].completed_ids == [0, 2]
        assert loaded.points.total == 40
        assert json.loads(raw)["activities"]["t1"] == {"completedIds": [0, 2]}

    def test_upsert_replaces_and_keeps_name(self, db_path):
        async def go():
            async with connect() as db:
                store = TrackingStore(db)
                await store.upsert("s1", StudentTrackingRecord(), student_name="سارة")
                updated = StudentTrackingRecord.model_validate({"points": {"total": 20}})
                await store.upsert("s1", updated)
                return await store.fetch_all()

        rows = asyncio.run(go())

        assert len(rows) == 1
        assert rows[0].student_name == "سارة"
        assert rows[0].record.points.total == 20

    def test_unknown_keys_survive_round_trip(self, db_path):
        async def go():
            async with connect() as db:
                await _insert_raw(db, "s1", json.dumps({"lessons": {}, "streak": 3}))
                store = TrackingStore(db)
                record = await store.fetch_one("s1")
                await store.upsert("s1", record)
                return await _raw_tracking_data(db, "s1")

        assert json.loads(asyncio.run(go()))["streak"] == 3

    def test_malformed_json(self, db_path):
        async def go():
            async with connect() as db:
                await _insert_raw(db, "bad", "{not json")
                await _insert_raw(db, "good", json.dumps({"lessons": {"t1": {"completed": True}}}))
                store = TrackingStore(db)
                with pytest.raises(ValueError):
                    await store.fetch_one("bad")
                return await store.fetch_all()

        rows = {row.student_id: row for row in asyncio.run(go())}

        assert rows["bad"].record is None
        assert rows["good"].record.lessons["t1"].completed is True


class TestEndToEnd:

    def test_recorders_then_reconcile(self, db_path):
        async def go():
            async with connect() as db:
                store = TrackingStore(db)
                await track_lesson_completion(store, "s1", "report-writing")
                await track_activity_submission(store, "s1", "report-writing", 0)
                await track_activity_submission(store, "s1", "report-writing", 0)
                await track_collaborative_completion(store, "s1", "report-writing", "dialogue")
                cached = (await store.fetch_one("s1")).points.total
                return cached, await get_student_points(store, "s1")

        cached, points = asyncio.run(go())

        assert cached == points == 40

    def test_bulk_reconcile_skips_undecodable_record(self, db_path):
        async def go():
            async with connect() as db:
                await _insert_raw(db, "bad", "[]]")
                await _insert_raw(db, "drifted", json.dumps({
                    "lessons": {"t1": {"completed": True}},
                    "points": {"total": -15},
                }))
                store = TrackingStore(db)
                report = await recalculate_all_student_points(store)
                return report, await store.fetch_one("drifted")

        report, drifted = asyncio.run(go())

        assert report.success == 1
        assert report.errors == 1
        assert drifted.points.total == 20
