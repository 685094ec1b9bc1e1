import logging
import time
from contextlib import asynccontextmanager
from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from revhub.application.factory import Services
from revhub.consts import VERSION
from revhub.domain.errors import NotFoundError, PersistenceError, RevhubError, ValidationError
from revhub.domain.srs.models import Bookmark, SchedulingState, feedback_log_to_dict

logger = logging.getLogger("revhub.server")


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the HTTP app. Without explicit services the stores are resolved
    from configuration at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"revhub server v{VERSION} starting up...")
        if getattr(app.state, "services", None) is None:
            from revhub.application.config import resolve_config
            from revhub.application.factory import build_services

            config = resolve_config()
            logging.basicConfig(level=config.log_level)
            app.state.services = build_services(config)
        yield
        logger.info("revhub server shutting down...")

    app = FastAPI(
        title="revhub",
        description="Spaced repetition scheduling for bookmarked practice questions.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.services = services
    app.include_router(_router())
    return app


def get_services(request: Request) -> Services:
    services = request.app.state.services
    if services is None:
        raise HTTPException(status_code=503, detail="Server is not initialised")
    return services


def _http_error(e: RevhubError) -> HTTPException:
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PersistenceError):
        logger.error(f"Persistence failure: {e}", exc_info=True)
        return HTTPException(status_code=500, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class SrsStateModel(BaseModel):
    repetitions: int
    ease_factor: float
    interval: int
    next_review_date: date | None

    @classmethod
    def of(cls, state: SchedulingState) -> "SrsStateModel":
        return cls(**state.to_dict())


class BookmarkModel(BaseModel):
    id: str
    user_id: str
    question_id: str
    srs_state: SrsStateModel
    custom_reminder_active: bool
    custom_reminder_date: date | None
    created_at: date | None

    @classmethod
    def of(cls, b: Bookmark) -> "BookmarkModel":
        return cls(
            id=b.id,
            user_id=b.user_id,
            question_id=b.question_id,
            srs_state=SrsStateModel.of(b.state),
            custom_reminder_active=b.reminder.active,
            custom_reminder_date=b.reminder.date,
            created_at=b.created_at,
        )


class CreateBookmarkRequest(BaseModel):
    user_id: str
    question_id: str


class CustomReminderRequest(BaseModel):
    user_id: str
    is_custom_reminder_active: bool
    custom_next_review_date: str | None = None


class LogReviewRequest(BaseModel):
    user_id: str
    bookmark_id: str
    performance_rating: Any  # validated by the service so bad ratings return 400


class FeedbackSubmitRequest(BaseModel):
    user_id: str
    question_id: str
    rating: Any


class FeedbackUndoRequest(BaseModel):
    user_id: str
    question_id: str


class PacingRequest(BaseModel):
    pacing_mode: Any


class DelayRequest(BaseModel):
    delay_days: Any


start_time = time.time()


def _router():
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    async def health_check():
        """
        Simple health check to verify server is reachable.
        """
        return HealthResponse(
            status="ok", version=VERSION, uptime_seconds=time.time() - start_time
        )

    @router.get("/version")
    async def get_version():
        return {"version": VERSION}

    # --- Bookmarks -------------------------------------------------------

    @router.post("/bookmarks", response_model=BookmarkModel)
    async def create_bookmark(req: CreateBookmarkRequest, services: Services = Depends(get_services)):
        try:
            bookmark = await services.srs.create_bookmark(req.user_id, req.question_id)
        except RevhubError as e:
            raise _http_error(e) from e
        return BookmarkModel.of(bookmark)

    @router.delete("/bookmarks/{bookmark_id}")
    async def delete_bookmark(
        bookmark_id: str, user_id: str, services: Services = Depends(get_services)
    ):
        try:
            await services.srs.remove_bookmark(user_id, bookmark_id)
        except RevhubError as e:
            raise _http_error(e) from e
        return {"success": True}

    @router.put("/bookmarks/{bookmark_id}/custom-reminder")
    async def set_custom_reminder(
        bookmark_id: str, req: CustomReminderRequest, services: Services = Depends(get_services)
    ):
        """Set or disable a custom reminder; an active reminder bypasses SRS for due checks."""
        try:
            reminder = await services.srs.set_custom_reminder(
                req.user_id,
                bookmark_id,
                req.is_custom_reminder_active,
                req.custom_next_review_date,
            )
        except RevhubError as e:
            raise _http_error(e) from e
        message = (
            f"Custom reminder set for {reminder.date.isoformat()}"
            if reminder.active
            else "Custom reminder disabled - question will use SRS scheduling"
        )
        return {"success": True, "message": message}

    @router.post("/reviews/log")
    async def log_review(req: LogReviewRequest, services: Services = Depends(get_services)):
        try:
            result = await services.srs.log_review(
                req.user_id, req.bookmark_id, req.performance_rating
            )
        except RevhubError as e:
            raise _http_error(e) from e
        return {
            "success": True,
            "previous_srs_state": SrsStateModel.of(result.previous_srs_state),
            "updated_srs_state": SrsStateModel.of(result.updated_srs_state),
            "custom_reminder_cleared": result.custom_reminder_cleared,
        }

    # --- Session feedback -------------------------------------------------

    @router.get("/srs-feedback/{result_id}")
    async def get_feedback(result_id: str, user_id: str, services: Services = Depends(get_services)):
        try:
            log = await services.srs.get_feedback_log(result_id, user_id)
        except RevhubError as e:
            raise _http_error(e) from e
        return {"success": True, "feedback_log": feedback_log_to_dict(log)}

    @router.post("/srs-feedback/{result_id}/submit")
    async def submit_feedback(
        result_id: str, req: FeedbackSubmitRequest, services: Services = Depends(get_services)
    ):
        logger.info(f"Feedback submit: result={result_id} question={req.question_id}")
        try:
            outcome = await services.srs.submit_review(
                result_id, req.question_id, req.user_id, req.rating
            )
        except RevhubError as e:
            raise _http_error(e) from e
        return {
            "success": True,
            "updated_srs_state": SrsStateModel.of(outcome.updated_srs_state),
            "feedback_log": feedback_log_to_dict(outcome.feedback_log),
        }

    @router.post("/srs-feedback/{result_id}/undo")
    async def undo_feedback(
        result_id: str, req: FeedbackUndoRequest, services: Services = Depends(get_services)
    ):
        try:
            log = await services.srs.undo_review(result_id, req.question_id, req.user_id)
        except RevhubError as e:
            raise _http_error(e) from e
        return {"success": True, "feedback_log": feedback_log_to_dict(log)}

    # --- Due set ----------------------------------------------------------

    @router.get("/due-questions")
    async def due_questions(
        user_id: str, today: date | None = None, services: Services = Depends(get_services)
    ):
        questions = await services.srs.get_due_questions(user_id, today)
        return {
            "questions": [q.to_dict() for q in questions],
            "count": len(questions),
        }

    @router.get("/due-count")
    async def due_count(user_id: str, services: Services = Depends(get_services)):
        return {"count": await services.srs.get_due_count(user_id)}

    # --- Preferences ------------------------------------------------------

    @router.get("/users/{user_id}/srs-preferences")
    async def get_preferences(user_id: str, services: Services = Depends(get_services)):
        return {"srs_pacing_mode": await services.srs.get_pacing(user_id)}

    @router.post("/users/{user_id}/srs-preferences/pacing")
    async def update_pacing(
        user_id: str, req: PacingRequest, services: Services = Depends(get_services)
    ):
        try:
            result = await services.srs.update_pacing(user_id, req.pacing_mode)
        except RevhubError as e:
            raise _http_error(e) from e
        return {
            "success": True,
            "updated_count": result.updated_count,
            "newly_due_count": result.due_count,
        }

    @router.post("/users/{user_id}/srs-preferences/delay")
    async def delay_reviews(
        user_id: str, req: DelayRequest, services: Services = Depends(get_services)
    ):
        try:
            result = await services.srs.delay_all_reviews(user_id, req.delay_days)
        except RevhubError as e:
            raise _http_error(e) from e
        return {
            "success": True,
            "updated_count": result.updated_count,
            "now_due_count": result.due_count,
        }

    # --- Analytics --------------------------------------------------------

    @router.get("/users/{user_id}/analytics/retention")
    async def retention(user_id: str, services: Services = Depends(get_services)):
        return await services.stats.get_retention(user_id)

    @router.get("/users/{user_id}/analytics/streak")
    async def streak(user_id: str, services: Services = Depends(get_services)):
        return await services.stats.get_streak(user_id)

    return router


app = create_app()
