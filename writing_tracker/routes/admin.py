"""
Admin-only maintenance endpoints protected by the X-Admin-Secret header.
"""

import secrets

from fastapi import APIRouter, Depends, Header, HTTPException

from writing_tracker.config import settings
from writing_tracker.db.database import get_db
from writing_tracker.db.tracking_store import TrackingStore
from writing_tracker.models.points import RecalculationReport
from writing_tracker.services.reconciler import recalculate_all_student_points

router = APIRouter(prefix="/api/admin", tags=["admin"])


def _require_admin(x_admin_secret: str = Header(default="")) -> None:
    """Verify the caller presented the configured admin secret."""
    if not x_admin_secret or not secrets.compare_digest(x_admin_secret, settings.admin_secret):
        raise HTTPException(status_code=403, detail="Admin access required")


@router.post(
    "/points/recalculate",
    response_model=RecalculationReport,
    dependencies=[Depends(_require_admin)],
)
async def recalculate_points(dry_run: bool = False, db=Depends(get_db)):
    """Recompute every student's cached points total.

    Run once after changing point values. With ``dry_run`` the report lists
    the corrections without writing them.
    """
    return await recalculate_all_student_points(TrackingStore(db), dry_run=dry_run)
