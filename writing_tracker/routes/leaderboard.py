from fastapi import APIRouter, Depends

from writing_tracker.db.database import get_db
from writing_tracker.services.leaderboard import build_leaderboard

router = APIRouter(prefix="/api/leaderboard", tags=["leaderboard"])


@router.get("")
async def leaderboard(db=Depends(get_db)):
    entries = await build_leaderboard(db)
    return {"entries": [e.model_dump() for e in entries]}
