import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from writing_tracker.db import sessions as session_db
from writing_tracker.db.database import get_db
from writing_tracker.models.tracking import SessionType
from writing_tracker.services import confirmations
from writing_tracker.services.session_timer import end_session, start_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sessions"])


class StartSessionBody(BaseModel):
    student_id: str
    topic_id: str
    session_type: SessionType


class ConfirmationRequestBody(BaseModel):
    student_id: str = ""
    topic_id: str = ""
    tracking_type: str = ""
    activity_id: Optional[int] = None
    confirmation_data: Optional[Dict[str, Any]] = None


@router.post("/sessions")
async def start_timed_session(body: StartSessionBody, db=Depends(get_db)):
    session_id = await start_session(db, body.student_id, body.topic_id, body.session_type)
    if session_id is None:
        raise HTTPException(status_code=503, detail="Could not start session")
    return {"session_id": session_id}


@router.post("/sessions/{session_id}/end")
async def end_timed_session(session_id: int, db=Depends(get_db)):
    try:
        session = await session_db.get_session_duration(db, session_id)
    except Exception as exc:
        logger.error("Error reading session %s: %s", session_id, exc)
        raise HTTPException(status_code=503, detail="Could not read session")
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    duration = await end_session(db, session_id)
    return {"session_id": session_id, "duration_seconds": duration}


@router.post("/confirmations")
async def request_confirmation(body: ConfirmationRequestBody, db=Depends(get_db)):
    payload = body.model_dump()
    validation = confirmations.validate_tracking_data(payload)
    if not validation["is_valid"]:
        raise HTTPException(status_code=400, detail=validation["reason"])

    confirmation_id = await confirmations.request_tracking_confirmation(
        db,
        body.student_id,
        body.tracking_type,
        body.topic_id,
        activity_id=body.activity_id,
        confirmation_data=body.confirmation_data,
    )
    if confirmation_id is None:
        raise HTTPException(status_code=503, detail="Could not store confirmation request")
    return {
        "confirmation_id": confirmation_id,
        "data_quality_score": confirmations.calculate_data_quality_score(payload),
    }


@router.post("/confirmations/{confirmation_id}/confirm")
async def confirm(confirmation_id: int, db=Depends(get_db)):
    if not await confirmations.confirm_tracking(db, confirmation_id):
        raise HTTPException(status_code=404, detail="Confirmation request not found")
    return {"confirmation_id": confirmation_id, "is_confirmed": True}
