import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from writing_tracker.db import activity_log
from writing_tracker.db.database import get_db
from writing_tracker.db.tracking_store import TrackingStore
from writing_tracker.models.points import PointsBreakdown
from writing_tracker.models.tracking import (
    CollaborativeKind,
    StudentTrackingRecord,
    TrackingOutcome,
)
from writing_tracker.services import tracking
from writing_tracker.services.leaderboard import level_for_points
from writing_tracker.services.points import calculate_breakdown
from writing_tracker.services.reconciler import get_student_points
from writing_tracker.services.topic_catalog import Topic, get_topic

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["tracking"])


class ActivitySubmissionBody(BaseModel):
    activity_id: int = Field(ge=0)
    response_text: Optional[str] = None


class EvaluationBody(BaseModel):
    score: float
    submission_text: Optional[str] = None


class TrackingResponse(BaseModel):
    recorded: bool
    outcome: Optional[TrackingOutcome] = None


class PointsResponse(BaseModel):
    student_id: str
    total_points: int
    level: str
    breakdown: Optional[PointsBreakdown] = None


def _require_topic(topic_id: str) -> Topic:
    topic = get_topic(topic_id)
    if topic is None:
        raise HTTPException(status_code=404, detail="Topic not found")
    return topic


def _response(outcome: Optional[TrackingOutcome]) -> TrackingResponse:
    return TrackingResponse(recorded=outcome is not None, outcome=outcome)


@router.get("/tracking/{student_id}", response_model=StudentTrackingRecord)
async def get_tracking(student_id: str, db=Depends(get_db)):
    record = await TrackingStore(db).fetch_one(student_id)
    return record or StudentTrackingRecord()


@router.post("/tracking/{student_id}/lessons/{topic_id}", response_model=TrackingResponse)
async def complete_lesson(student_id: str, topic_id: str, db=Depends(get_db)):
    _require_topic(topic_id)
    outcome = await tracking.track_lesson_completion(TrackingStore(db), student_id, topic_id)
    return _response(outcome)


@router.post("/tracking/{student_id}/activities/{topic_id}", response_model=TrackingResponse)
async def submit_activity(
    student_id: str,
    topic_id: str,
    body: ActivitySubmissionBody,
    db=Depends(get_db),
):
    _require_topic(topic_id)
    await activity_log.upsert_activity_submission(
        db, student_id, topic_id, body.activity_id, body.response_text
    )
    outcome = await tracking.track_activity_submission(
        TrackingStore(db), student_id, topic_id, body.activity_id
    )
    return _response(outcome)


@router.post("/tracking/{student_id}/evaluations/{topic_id}", response_model=TrackingResponse)
async def submit_evaluation(
    student_id: str,
    topic_id: str,
    body: EvaluationBody,
    db=Depends(get_db),
):
    topic = _require_topic(topic_id)
    if body.submission_text:
        await activity_log.insert_submission(
            db, student_id, topic.title, body.submission_text, ai_grade=body.score
        )
    outcome = await tracking.track_evaluation_submission(
        TrackingStore(db), student_id, topic_id, body.score
    )
    return _response(outcome)


@router.post(
    "/tracking/{student_id}/collaborative/{topic_id}/{activity_kind}",
    response_model=TrackingResponse,
)
async def complete_collaborative(
    student_id: str,
    topic_id: str,
    activity_kind: CollaborativeKind,
    db=Depends(get_db),
):
    _require_topic(topic_id)
    if not await activity_log.has_collaborative_completion(db, student_id, topic_id, activity_kind):
        await activity_log.insert_collaborative_completion(db, student_id, topic_id, activity_kind)
    outcome = await tracking.track_collaborative_completion(
        TrackingStore(db), student_id, topic_id, activity_kind
    )
    return _response(outcome)


@router.get("/points/{student_id}", response_model=PointsResponse)
async def get_points(student_id: str, db=Depends(get_db)):
    store = TrackingStore(db)
    total = await get_student_points(store, student_id)
    try:
        rewards = await activity_log.get_point_rewards(db)
    except Exception as exc:
        logger.error("Error reading point rewards: %s", exc)
        rewards = []

    try:
        breakdown = calculate_breakdown(await store.fetch_one(student_id))
    except Exception as exc:
        logger.error("Error reading points breakdown for student %s: %s", student_id, exc)
        breakdown = None

    return PointsResponse(
        student_id=student_id,
        total_points=total,
        level=level_for_points(total, rewards),
        breakdown=breakdown,
    )
