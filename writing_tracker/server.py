import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from writing_tracker.config import settings
from writing_tracker.db.database import close_db, init_db
from writing_tracker.routes.admin import router as admin_router
from writing_tracker.routes.leaderboard import router as leaderboard_router
from writing_tracker.routes.sessions import router as sessions_router
from writing_tracker.routes.tracking import router as tracking_router

logger = logging.getLogger(__name__)

_DEV_ORIGINS = [
    "http://localhost:8000",
    "http://127.0.0.1:8000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def allowed_origins(cors_origins: str, env: str) -> list[str]:
    """CORS_ORIGINS (comma-separated) when set; localhost defaults in dev only."""
    if cors_origins:
        return [o.strip() for o in cors_origins.split(",") if o.strip()]
    if env == "prod":
        return []
    return list(_DEV_ORIGINS)


_allowed_origins = allowed_origins(settings.cors_origins, settings.env)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.env == "prod" and not _allowed_origins:
        logger.warning("ENV=prod without CORS_ORIGINS: cross-origin requests are refused")
    await init_db()
    yield
    await close_db()


app = FastAPI(title="Writing Tracker", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "X-Admin-Secret"],
)

app.include_router(tracking_router)
app.include_router(leaderboard_router)
app.include_router(sessions_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
