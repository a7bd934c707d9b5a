"""
FastAPI app entrypoint.

Study-abroad advisory backend: applications, notifications and the deadline tracker.
The daily deadline sweep and weekly cleanup run on a background scheduler.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from eduglobal.api.routes import applications, deadlines, notifications
from eduglobal.config import settings
from eduglobal.core.errors import install_error_handlers
from eduglobal.scheduler.deadline_jobs import deadline_tasks
from eduglobal.scheduler.recurring import register_tasks

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)
        register_tasks(scheduler, deadline_tasks())
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info("Scheduler started (tz=%s)", settings.scheduler_timezone)
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false)")
    logger.info("Backend ready (env=%s)", settings.env)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)


app = FastAPI(title="EduGlobal", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_cors_origins.extend(settings.cors_origin_list)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

app.include_router(applications.router, prefix="/api", tags=["applications"])
app.include_router(notifications.router, prefix="/api", tags=["notifications"])
app.include_router(deadlines.router, prefix="/api", tags=["deadlines"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "EduGlobal API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
