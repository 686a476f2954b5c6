"""Leaderboard standings computed from freshly queried rows."""

import logging
from typing import Any, Optional

from writing_tracker.db import activity_log
from writing_tracker.db.tracking_store import TrackingStore
from writing_tracker.models.points import (
    ActivitySubmissionRow,
    CollaborativeCompletionRow,
    LeaderboardEntry,
    PointCalculationData,
    SubmissionRow,
)
from writing_tracker.models.tracking import StudentTrackingRecord
from writing_tracker.services.points import calculate_points_from_data
from writing_tracker.services.topic_catalog import Topic

logger = logging.getLogger(__name__)

DEFAULT_LEVEL_TITLE = "مبتدئ"


def level_for_points(points: int, rewards: list[dict[str, Any]]) -> str:
    """First reward (highest threshold first) whose min_points the student has reached."""
    for reward in rewards:
        if (reward.get("min_points") or 0) <= points:
            return reward["title"]
    return DEFAULT_LEVEL_TITLE


def _category(record: Optional[StudentTrackingRecord], name: str):
    # A category missing from the stored JSON falls back to the raw rows
    if record is None or name not in record.model_fields_set:
        return None
    return getattr(record, name)


def _display_name(student: dict[str, Any]) -> str:
    return student.get("full_name") or student.get("username") or student["id"]


def rank_students(
    students: list[dict[str, Any]],
    tracking: dict[str, Optional[StudentTrackingRecord]],
    activity_rows: list[dict[str, Any]],
    collaborative_rows: list[dict[str, Any]],
    submission_rows: list[dict[str, Any]],
    rewards: list[dict[str, Any]],
    catalog: Optional[list[Topic]] = None,
) -> list[LeaderboardEntry]:
    entries = []
    for student in students:
        student_id = student["id"]
        record = tracking.get(student_id)
        data = PointCalculationData(
            lessons=_category(record, "lessons"),
            activities=_category(record, "activities"),
            evaluations=_category(record, "evaluations"),
            collaborative=_category(record, "collaborative"),
            activity_submissions=[
                ActivitySubmissionRow(**r) for r in activity_rows if r["student_id"] == student_id
            ],
            collaborative_completions=[
                CollaborativeCompletionRow(**r) for r in collaborative_rows if r["student_id"] == student_id
            ],
            submissions=[
                SubmissionRow(topic_title=r.get("topic_title"), student_id=student_id)
                for r in submission_rows if r["student_id"] == student_id
            ],
        )
        points = calculate_points_from_data(data, catalog)
        entries.append(LeaderboardEntry(
            rank=0,
            student_id=student_id,
            name=_display_name(student),
            total_points=points,
            level=level_for_points(points, rewards),
        ))

    entries.sort(key=lambda e: e.total_points, reverse=True)
    for i, entry in enumerate(entries):
        entry.rank = i + 1
    return entries


async def build_leaderboard(db) -> list[LeaderboardEntry]:
    students = await activity_log.get_students(db)
    if not students:
        return []
    student_ids = [s["id"] for s in students]

    tracking = {row.student_id: row.record for row in await TrackingStore(db).fetch_all()}
    activity_rows = await activity_log.get_activity_submissions(db, student_ids)
    collaborative_rows = await activity_log.get_collaborative_completions(db, student_ids)
    submission_rows = await activity_log.get_submissions(db, student_ids)
    rewards = await activity_log.get_point_rewards(db)

    return rank_students(students, tracking, activity_rows, collaborative_rows, submission_rows, rewards)
