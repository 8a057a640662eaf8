import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field

from mneme.application.review_service import ItemLocks, ReviewService
from mneme.consts import VERSION
from mneme.domain.errors import InvalidInputError, ItemNotFoundError, MnemeError
from mneme.domain.srs.models import ActivityOutcome, ActivityType
from mneme.infrastructure.serialization import ensure_timezone

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("mneme.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"Mneme Server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("Mneme Server shutting down...")


app = FastAPI(
    title="Mneme Server",
    description="Spaced-repetition scheduling service for vocabulary practice.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()

_backend: Any = None


def get_backend():
    """
    Store shared by all requests, created from config on first use.

    Tests replace it through ``app.dependency_overrides``.
    """
    global _backend
    if _backend is None:
        from mneme.application.config import resolve_config
        from mneme.application.factory import get_store

        _backend = get_store(resolve_config())
    return _backend


def get_config():
    from mneme.application.config import resolve_config

    return resolve_config()


_item_locks = ItemLocks()


def get_review_service(backend=Depends(get_backend), config=Depends(get_config)) -> ReviewService:
    """Review service for one request; all of them share the same per-item locks."""
    return ReviewService(backend, min_interval_hours=config.min_interval_hours, locks=_item_locks)


def _now(value: datetime | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return ensure_timezone(value)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ScheduleModel(BaseModel):
    algorithm: str
    streak: int
    interval_hours: float
    ease_factor: float
    due_at: datetime
    last_reviewed_at: datetime | None = None


class ReviewRequest(BaseModel):
    activity_type: ActivityType
    was_correct: bool
    score: float | None = Field(default=None, ge=0.0, le=1.0)
    attempted_at: datetime | None = None


class ReviewResponse(BaseModel):
    id: str
    quality: int
    was_successful: bool
    schedule: ScheduleModel
    summary: dict[str, Any]


class QueueResponse(BaseModel):
    queue: list[str]
    due_count: int
    upcoming_count: int
    new_count: int


class ProgressResponse(BaseModel):
    user_id: str | None = None
    total_vocab_count: int
    learned_vocab_count: int
    review_due_count: int
    streak_days: int
    last_session_at: datetime | None = None


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.post("/items/{item_id}/review", response_model=ReviewResponse)
def review_item(
    item_id: str,
    req: ReviewRequest,
    service: ReviewService = Depends(get_review_service),
):
    """Apply a practice outcome to an item and persist the new schedule."""
    from mneme.application.outcome_classifier import performance_summary

    attempted_at = _now(req.attempted_at)
    outcome = ActivityOutcome(
        activity_type=req.activity_type,
        was_correct=req.was_correct,
        attempted_at=attempted_at,
        score=req.score,
    )

    try:
        item, update = service.record_outcome(item_id, outcome)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except InvalidInputError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except MnemeError as e:
        logger.error(f"Review failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    schedule = update.schedule
    return ReviewResponse(
        id=item.id,
        quality=update.quality,
        was_successful=update.was_successful,
        schedule=ScheduleModel(
            algorithm=schedule.algorithm,
            streak=schedule.streak,
            interval_hours=schedule.interval_hours,
            ease_factor=schedule.ease_factor,
            due_at=schedule.due_at,
            last_reviewed_at=schedule.last_reviewed_at,
        ),
        summary=performance_summary(item, attempted_at),
    )


@app.get("/queue", response_model=QueueResponse)
def get_queue(
    limit: int | None = None,
    window: float | None = None,
    now: datetime | None = None,
    backend=Depends(get_backend),
    config=Depends(get_config),
):
    """Ordered practice queue plus due/upcoming/new counts."""
    from mneme.application.review_service import QueueService

    if limit is not None and limit < 0:
        raise HTTPException(status_code=422, detail="limit must be >= 0")

    try:
        service = QueueService(
            backend,
            upcoming_window_hours=window if window is not None else config.upcoming_window_hours,
            default_limit=config.queue_limit,
        )
        result = service.get_queue(_now(now), limit=limit)
    except MnemeError as e:
        logger.error(f"Queue build failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return QueueResponse(
        queue=[item.id for item in result.queue],
        due_count=result.due_count,
        upcoming_count=result.upcoming_count,
        new_count=result.new_count,
    )


@app.get("/progress", response_model=ProgressResponse)
def get_progress(
    user_id: str | None = None,
    now: datetime | None = None,
    backend=Depends(get_backend),
    config=Depends(get_config),
):
    """Dashboard statistics recomputed from the stored items and sessions."""
    from mneme.application.stats.service import ProgressService

    try:
        service = ProgressService(
            backend, backend, learned_streak_threshold=config.learned_streak_threshold
        )
        stats = service.get_progress(_now(now), user_id=user_id)
    except MnemeError as e:
        logger.error(f"Progress failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return ProgressResponse(
        user_id=stats.user_id,
        total_vocab_count=stats.total_vocab_count,
        learned_vocab_count=stats.learned_vocab_count,
        review_due_count=stats.review_due_count,
        streak_days=stats.streak_days,
        last_session_at=stats.last_session_at,
    )
