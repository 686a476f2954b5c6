from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

TrackingCategory = Literal["lesson", "activity", "evaluation", "collaborative"]
CollaborativeKind = Literal["discussion", "dialogue"]
SessionType = Literal["lesson", "review", "evaluation", "activity", "collaborative"]

TRACKING_CATEGORIES: tuple[str, ...] = ("lesson", "activity", "evaluation", "collaborative")
COLLABORATIVE_KINDS: tuple[str, ...] = ("discussion", "dialogue")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class LessonEntry(BaseModel):
    completed: bool = False


class ActivityEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    completed_ids: list[int] = Field(default=[], alias="completedIds")

    @field_validator("completed_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("completed_ids")
    @classmethod
    def _unique_ids(cls, value: list[int]) -> list[int]:
        # keeps first-seen order
        return list(dict.fromkeys(value))


class EvaluationEntry(BaseModel):
    score: Optional[float] = None
    timestamp: Optional[str] = None


class CollaborativeEntry(BaseModel):
    discussion: bool = False
    dialogue: bool = False
    timestamp: Optional[str] = None

    def completed_kinds(self) -> int:
        return int(self.discussion) + int(self.dialogue)


class PointsCache(BaseModel):
    """Denormalized points total. Only a hint; the calculator is authoritative."""

    total: Optional[int] = None

    @field_validator("total", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> Optional[int]:
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None


class StudentTrackingRecord(BaseModel):
    """Per-student aggregate of completed lessons, activities, evaluations and
    collaborative sessions, keyed by topic id.

    Every category defaults to an empty mapping so callers never have to check
    for absent keys. Unknown top-level keys are preserved on round trip.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    lessons: dict[str, LessonEntry] = {}
    activities: dict[str, ActivityEntry] = {}
    evaluations: dict[str, EvaluationEntry] = {}
    collaborative: dict[str, CollaborativeEntry] = {}
    points: PointsCache = PointsCache()

    @field_validator("lessons", "activities", "evaluations", "collaborative", mode="before")
    @classmethod
    def _drop_null_entries(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if v is not None}
        return value

    @field_validator("points", mode="before")
    @classmethod
    def _null_points(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def cached_total(self) -> int:
        return self.points.total if self.points.total is not None else 0

    def to_storage(self) -> dict[str, Any]:
        """Serialize with the stored JSON key names (``completedIds``)."""
        return self.model_dump(mode="json", by_alias=True)


class TrackingRow(BaseModel):
    student_id: str
    student_name: Optional[str] = None
    # None when the stored JSON could not be decoded
    record: Optional[StudentTrackingRecord] = None


class TrackingOutcome(BaseModel):
    """Result of one recorder call that reached storage."""

    student_id: str
    topic_id: str
    category: TrackingCategory
    first_completion: bool
    points_awarded: int
    cached_total: int
