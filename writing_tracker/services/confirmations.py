"""
confirmations.py - Teacher confirmation of tracked completions

Provides:
- validate_tracking_data(data) - required fields and category check
- calculate_data_quality_score(data) - 100 for valid payloads, 50 otherwise
- request_tracking_confirmation(db, ...) - store an unconfirmed request
- confirm_tracking(db, confirmation_id) - mark a request confirmed
"""

import logging
from typing import Any, Dict, Optional

from writing_tracker.db import sessions as session_db
from writing_tracker.models.tracking import TRACKING_CATEGORIES

logger = logging.getLogger(__name__)


def validate_tracking_data(data: Dict[str, Any]) -> Dict[str, Any]:
    if not data.get("student_id") or not data.get("topic_id") or not data.get("tracking_type"):
        return {"is_valid": False, "reason": "Missing required fields"}
    if data["tracking_type"] not in TRACKING_CATEGORIES:
        return {"is_valid": False, "reason": f"Unknown tracking type: {data['tracking_type']}"}
    return {"is_valid": True}


def calculate_data_quality_score(data: Dict[str, Any]) -> int:
    return 100 if validate_tracking_data(data)["is_valid"] else 50


async def request_tracking_confirmation(
    db,
    student_id: str,
    tracking_type: str,
    topic_id: str,
    activity_id: Optional[int] = None,
    confirmation_data: Optional[Dict[str, Any]] = None,
) -> Optional[int]:
    try:
        return await session_db.create_tracking_confirmation(
            db, student_id, tracking_type, topic_id, activity_id, confirmation_data
        )
    except Exception as exc:
        logger.error("Failed to request tracking confirmation for student %s: %s", student_id, exc)
        return None


async def confirm_tracking(db, confirmation_id: int) -> bool:
    """Returns False when the request does not exist or could not be updated."""
    try:
        existing = await session_db.get_tracking_confirmation(db, confirmation_id)
        if existing is None:
            return False
        await session_db.mark_tracking_confirmed(db, confirmation_id)
    except Exception as exc:
        logger.error("Failed to confirm tracking %s: %s", confirmation_id, exc)
        return False
    return True
