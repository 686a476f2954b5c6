"""
tracking.py - Tracking recorders, one per activity category

Provides:
- track_lesson_completion(store, student_id, topic_id)
- track_activity_submission(store, student_id, topic_id, activity_id)
- track_evaluation_submission(store, student_id, topic_id, score)
- track_collaborative_completion(store, student_id, topic_id, activity_kind)

Each recorder reads the student's tracking record, merges one completion
fact, bumps the cached points total only when the fact is new, and writes
the record back with a single upsert. Failures are logged and reported as
None; they never raise, so the user-facing action they are attached to is
not affected.

Recorder and reconciler calls for the same student are serialized within
this process. Writers in other processes are not coordinated; reconciliation
corrects any drift that results.
"""

import logging
from typing import Callable, Optional

from writing_tracker.models.tracking import (
    COLLABORATIVE_KINDS,
    ActivityEntry,
    CollaborativeEntry,
    EvaluationEntry,
    LessonEntry,
    StudentTrackingRecord,
    TrackingOutcome,
    utc_now_iso,
)
from writing_tracker.services.point_values import POINT_VALUES
from writing_tracker.services.student_locks import student_lock

logger = logging.getLogger(__name__)


async def _record(
    store,
    student_id: str,
    topic_id: str,
    category: str,
    merge: Callable[[StudentTrackingRecord], bool],
) -> Optional[TrackingOutcome]:
    """Read-merge-write one fact. ``merge`` mutates the record and returns True on first completion."""
    async with student_lock(student_id):
        try:
            record = await store.fetch_one(student_id)
        except Exception as exc:
            logger.error(
                "Error fetching tracking data for student %s (%s, topic %s): %s",
                student_id, category, topic_id, exc,
            )
            return None

        if record is None:
            record = StudentTrackingRecord()

        first_completion = merge(record)
        awarded = POINT_VALUES[category] if first_completion else 0
        record.points.total = record.cached_total + awarded

        try:
            await store.upsert(student_id, record)
        except Exception as exc:
            logger.error(
                "Error updating %s tracking data for student %s (topic %s): %s",
                category, student_id, topic_id, exc,
            )
            return None

    if first_completion:
        logger.debug("Student %s earned %d points (%s, topic %s)", student_id, awarded, category, topic_id)

    return TrackingOutcome(
        student_id=student_id,
        topic_id=topic_id,
        category=category,
        first_completion=first_completion,
        points_awarded=awarded,
        cached_total=record.cached_total,
    )


async def track_lesson_completion(store, student_id: str, topic_id: str) -> Optional[TrackingOutcome]:
    def merge(record: StudentTrackingRecord) -> bool:
        entry = record.lessons.get(topic_id)
        was_completed = entry is not None and entry.completed
        record.lessons[topic_id] = LessonEntry(completed=True)
        return not was_completed

    return await _record(store, student_id, topic_id, "lesson", merge)


async def track_activity_submission(
    store, student_id: str, topic_id: str, activity_id: int
) -> Optional[TrackingOutcome]:
    if activity_id < 0:
        logger.error("Ignoring activity submission with negative id %s for student %s", activity_id, student_id)
        return None

    def merge(record: StudentTrackingRecord) -> bool:
        entry = record.activities.setdefault(topic_id, ActivityEntry())
        if activity_id in entry.completed_ids:
            return False
        entry.completed_ids.append(activity_id)
        return True

    return await _record(store, student_id, topic_id, "activity", merge)


async def track_evaluation_submission(
    store, student_id: str, topic_id: str, score: float
) -> Optional[TrackingOutcome]:
    """Resubmitting replaces the stored score but earns nothing further."""

    def merge(record: StudentTrackingRecord) -> bool:
        was_evaluated = topic_id in record.evaluations
        record.evaluations[topic_id] = EvaluationEntry(score=score, timestamp=utc_now_iso())
        return not was_evaluated

    return await _record(store, student_id, topic_id, "evaluation", merge)


async def track_collaborative_completion(
    store, student_id: str, topic_id: str, activity_kind: str
) -> Optional[TrackingOutcome]:
    if activity_kind not in COLLABORATIVE_KINDS:
        logger.error("Unknown collaborative activity kind %r for student %s", activity_kind, student_id)
        return None

    def merge(record: StudentTrackingRecord) -> bool:
        entry = record.collaborative.setdefault(topic_id, CollaborativeEntry())
        was_completed = getattr(entry, activity_kind)
        setattr(entry, activity_kind, True)
        entry.timestamp = utc_now_iso()
        return not was_completed

    return await _record(store, student_id, topic_id, "collaborative", merge)
