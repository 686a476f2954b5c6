from typing import Any, Optional

from pydantic import BaseModel

from writing_tracker.models.tracking import (
    ActivityEntry,
    CollaborativeEntry,
    LessonEntry,
)


class ActivitySubmissionRow(BaseModel):
    topic_id: str
    activity_id: int
    student_id: Optional[str] = None


class CollaborativeCompletionRow(BaseModel):
    topic_id: str
    activity_kind: str
    student_id: Optional[str] = None


class SubmissionRow(BaseModel):
    topic_title: Optional[str] = None
    student_id: Optional[str] = None


class PointCalculationData(BaseModel):
    """Mixed input for points: structured categories and/or raw rows.

    A structured category, when present (even empty), wins over the raw rows
    describing the same category.
    """

    lessons: Optional[dict[str, LessonEntry]] = None
    activities: Optional[dict[str, ActivityEntry]] = None
    evaluations: Optional[dict[str, Any]] = None
    collaborative: Optional[dict[str, CollaborativeEntry]] = None
    activity_submissions: Optional[list[ActivitySubmissionRow]] = None
    collaborative_completions: Optional[list[CollaborativeCompletionRow]] = None
    submissions: Optional[list[SubmissionRow]] = None


class PointsBreakdown(BaseModel):
    lessons: int = 0
    activities: int = 0
    evaluations: int = 0
    collaborative: int = 0

    @property
    def total(self) -> int:
        return self.lessons + self.activities + self.evaluations + self.collaborative


class RecalculationResult(BaseModel):
    student_id: str
    old_points: int
    new_points: int
    error: Optional[str] = None


class RecalculationReport(BaseModel):
    success: int = 0
    errors: int = 0
    results: list[RecalculationResult] = []


class LeaderboardEntry(BaseModel):
    rank: int
    student_id: str
    name: str
    total_points: int
    level: str
