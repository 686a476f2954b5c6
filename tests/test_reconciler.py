"""Tests for single-student and bulk point reconciliation."""

import asyncio
import logging

import pytest

from writing_tracker.services.reconciler import (
    get_student_points,
    recalculate_all_student_points,
    recalculate_and_update_points,
)
from writing_tracker.services.tracking import (
    track_activity_submission,
    track_lesson_completion,
)

from conftest import FakeTrackingStore

FACTS = {
    "lessons": {"t1": {"completed": True}},
    "activities": {"t1": {"completedIds": [0, 1]}},
}


def _store_with_total(total):
    data = dict(FACTS)
    if total is not None:
        data["points"] = {"total": total}
    return FakeTrackingStore({"s1": data})


class TestRecalculateAndUpdatePoints:

    def test_corrects_drifted_totals(self):
        for stale in (-30, None, 999):
            store = _store_with_total(stale)
            assert asyncio.run(recalculate_and_update_points(store, "s1")) == 40
            assert store.records["s1"].points.total == 40
            assert store.writes == ["s1"]

    def test_correct_total_is_not_rewritten(self):
        store = _store_with_total(40)
        assert asyncio.run(recalculate_and_update_points(store, "s1")) == 40
        assert store.writes == []

    def test_idempotent(self):
        store = _store_with_total(5)
        first = asyncio.run(recalculate_and_update_points(store, "s1"))
        second = asyncio.run(recalculate_and_update_points(store, "s1"))

        assert first == second == 40
        assert store.writes == ["s1"]

    def test_missing_record_is_zero_without_write(self, fake_store):
        assert asyncio.run(recalculate_and_update_points(fake_store, "nobody")) == 0
        assert fake_store.writes == []

    def test_dry_run_does_not_write(self):
        store = _store_with_total(5)
        assert asyncio.run(recalculate_and_update_points(store, "s1", dry_run=True)) == 40
        assert store.writes == []
        assert store.records["s1"].points.total == 5

    def test_correction_is_logged(self, caplog):
        store = _store_with_total(5)
        with caplog.at_level(logging.INFO, logger="writing_tracker.services.reconciler"):
            asyncio.run(recalculate_and_update_points(store, "s1"))
        assert "Correcting points for student s1: 5 -> 40" in caplog.text

    def test_store_errors_propagate(self):
        store = _store_with_total(5)
        store.fail_upsert.add("s1")
        with pytest.raises(RuntimeError, match="upsert failed"):
            asyncio.run(recalculate_and_update_points(store, "s1"))


class TestGetStudentPoints:

    def test_returns_reconciled_total(self):
        store = _store_with_total(-10)
        assert asyncio.run(get_student_points(store, "s1")) == 40
        assert store.records["s1"].points.total == 40

    def test_unknown_student_is_zero(self, fake_store):
        assert asyncio.run(get_student_points(fake_store, "nobody")) == 0

    def test_falls_back_to_cached_total_when_write_fails(self):
        store = _store_with_total(25)
        store.fail_upsert.add("s1")
        assert asyncio.run(get_student_points(store, "s1")) == 25

    def test_falls_back_to_calculation_without_cache(self):
        store = _store_with_total(None)
        store.fail_upsert.add("s1")
        assert asyncio.run(get_student_points(store, "s1")) == 40

    def test_read_failure_is_zero(self):
        store = _store_with_total(25)
        store.fail_fetch.add("s1")
        assert asyncio.run(get_student_points(store, "s1")) == 0


class TestRecalculateAllStudentPoints:

    def test_every_student_is_corrected(self):
        store = FakeTrackingStore({
            "a": {**FACTS, "points": {"total": 0}},
            "b": {**FACTS, "points": {"total": 40}},
            "c": {"evaluations": {"t1": {"score": 90}}},
        })
        report = asyncio.run(recalculate_all_student_points(store))

        assert report.success == 3
        assert report.errors == 0
        by_student = {r.student_id: r for r in report.results}
        assert (by_student["a"].old_points, by_student["a"].new_points) == (0, 40)
        assert (by_student["b"].old_points, by_student["b"].new_points) == (40, 40)
        assert (by_student["c"].old_points, by_student["c"].new_points) == (0, 10)
        assert sorted(store.writes) == ["a", "c"]

    def test_one_failure_does_not_stop_the_rest(self):
        store = FakeTrackingStore({
            "a": {**FACTS, "points": {"total": 0}},
            "b": {**FACTS, "points": {"total": 7}},
            "c": {**FACTS, "points": {"total": -1}},
        })
        store.fail_upsert.add("b")
        report = asyncio.run(recalculate_all_student_points(store))

        assert report.success == 2
        assert report.errors == 1
        failed = [r for r in report.results if r.error is not None]
        assert [r.student_id for r in failed] == ["b"]
        assert failed[0].new_points == failed[0].old_points == 7
        assert store.records["a"].points.total == 40
        assert store.records["c"].points.total == 40
        assert store.records["b"].points.total == 7

    def test_dry_run_reports_without_writing(self):
        store = FakeTrackingStore({"a": {**FACTS, "points": {"total": 0}}})
        report = asyncio.run(recalculate_all_student_points(store, dry_run=True))

        assert report.results[0].new_points == 40
        assert store.writes == []

    def test_empty_store(self, fake_store):
        report = asyncio.run(recalculate_all_student_points(fake_store))
        assert (report.success, report.errors, report.results) == (0, 0, [])

    def test_listing_failure_returns_empty_report(self, fake_store, caplog):
        fake_store.fail_fetch_all = True
        with caplog.at_level(logging.ERROR, logger="writing_tracker.services.reconciler"):
            report = asyncio.run(recalculate_all_student_points(fake_store))

        assert (report.success, report.errors, report.results) == (0, 0, [])
        assert "Error fetching student tracking data" in caplog.text


class TestReconcileDuringRecording:

    @pytest.mark.parametrize("reconcile_first", [False, True])
    def test_overlapping_reconcile_keeps_recorded_fact(self, reconcile_first):
        store = FakeTrackingStore({"s1": {"lessons": {"t1": {"completed": True}}, "points": {"total": 0}}})

        async def overlap():
            calls = [
                track_activity_submission(store, "s1", "t1", 0),
                recalculate_and_update_points(store, "s1"),
            ]
            if reconcile_first:
                calls.reverse()
            return await asyncio.gather(*calls)

        results = asyncio.run(overlap())
        outcome = results[1] if reconcile_first else results[0]

        assert outcome.first_completion is True
        record = store.records["s1"]
        assert record.activities["t1"].completed_ids == [0]
        assert record.points.total == 30

    def test_overlapping_display_read_keeps_recorded_fact(self, fake_store):
        async def overlap():
            await asyncio.gather(
                track_lesson_completion(fake_store, "s1", "t1"),
                get_student_points(fake_store, "s1"),
                track_activity_submission(fake_store, "s1", "t1", 4),
                get_student_points(fake_store, "s1"),
            )

        asyncio.run(overlap())

        record = fake_store.records["s1"]
        assert record.lessons["t1"].completed is True
        assert record.activities["t1"].completed_ids == [4]
        assert asyncio.run(get_student_points(fake_store, "s1")) == 30
