"""
points.py - Point totals computed from tracking facts

Provides:
- calculate_breakdown(record) - per-category points for a tracking record
- calculate_points_from_tracking(record) - total for a tracking record (None -> 0)
- calculate_points_from_data(data) - total from structured categories and/or raw rows

All functions are pure. The cached ``points.total`` of a record is never read.
"""

import logging
from typing import Optional

from writing_tracker.models.points import PointCalculationData, PointsBreakdown
from writing_tracker.models.tracking import (
    COLLABORATIVE_KINDS,
    ActivityEntry,
    CollaborativeEntry,
    LessonEntry,
    StudentTrackingRecord,
)
from writing_tracker.services.point_values import (
    ACTIVITY_POINTS,
    COLLABORATIVE_POINTS,
    EVALUATION_POINTS,
    LESSON_POINTS,
)
from writing_tracker.services.topic_catalog import Topic, find_topic_id_by_title

logger = logging.getLogger(__name__)


def _completed_lessons(lessons: dict[str, LessonEntry]) -> int:
    return sum(1 for entry in lessons.values() if entry.completed is True)


def _completed_activities(activities: dict[str, ActivityEntry]) -> int:
    return sum(len(entry.completed_ids) for entry in activities.values())


def _completed_collaborative(collaborative: dict[str, CollaborativeEntry]) -> int:
    return sum(entry.completed_kinds() for entry in collaborative.values())


def calculate_breakdown(record: Optional[StudentTrackingRecord]) -> PointsBreakdown:
    if record is None:
        return PointsBreakdown()
    return PointsBreakdown(
        lessons=_completed_lessons(record.lessons) * LESSON_POINTS,
        activities=_completed_activities(record.activities) * ACTIVITY_POINTS,
        # any evaluation entry counts, whatever its score
        evaluations=len(record.evaluations) * EVALUATION_POINTS,
        collaborative=_completed_collaborative(record.collaborative) * COLLABORATIVE_POINTS,
    )


def calculate_points_from_tracking(record: Optional[StudentTrackingRecord]) -> int:
    return calculate_breakdown(record).total


def calculate_points_from_data(
    data: PointCalculationData,
    catalog: Optional[list[Topic]] = None,
) -> int:
    """Compute a total from freshly queried rows, e.g. for leaderboards.

    Each category uses its structured mapping when one is given and falls back
    to the raw rows otherwise. Raw rows are de-duplicated on the same key the
    tracking record uses, so both shapes agree when they describe the same
    facts. Submissions are matched to topics by exact title; a title that
    matches no topic in the catalog is not counted.
    """
    points = 0

    if data.lessons is not None:
        points += _completed_lessons(data.lessons) * LESSON_POINTS

    if data.activities is not None:
        points += _completed_activities(data.activities) * ACTIVITY_POINTS
    elif data.activity_submissions is not None:
        unique_activities = {(row.topic_id, row.activity_id) for row in data.activity_submissions}
        points += len(unique_activities) * ACTIVITY_POINTS

    if data.evaluations is not None:
        points += len(data.evaluations) * EVALUATION_POINTS
    elif data.submissions is not None:
        matched = set()
        unmatched = 0
        for row in data.submissions:
            if not row.topic_title:
                continue
            topic_id = find_topic_id_by_title(row.topic_title, catalog)
            if topic_id is None:
                unmatched += 1
            else:
                matched.add(topic_id)
        if unmatched:
            logger.debug("%d submission(s) with unknown topic titles were not counted", unmatched)
        points += len(matched) * EVALUATION_POINTS

    if data.collaborative is not None:
        points += _completed_collaborative(data.collaborative) * COLLABORATIVE_POINTS
    elif data.collaborative_completions is not None:
        unique_completions = {
            (row.topic_id, row.activity_kind)
            for row in data.collaborative_completions
            if row.activity_kind in COLLABORATIVE_KINDS
        }
        points += len(unique_completions) * COLLABORATIVE_POINTS

    return points
