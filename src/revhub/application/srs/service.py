"""
SRS Service: Application layer orchestrator.

Coordinates the stores with the pure scheduling modules: session feedback,
due-set queries, pacing and delay bulk updates, custom reminders, and
direct revision-hub review logging.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from revhub.application.id_service import generate_bookmark_id
from revhub.application.locks import KeyedLock
from revhub.domain.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PACING,
    MAX_DELAY_DAYS,
    MAX_PACING,
    MIN_PACING,
)
from revhub.domain.errors import NotFoundError, ValidationError
from revhub.domain.srs.models import (
    Bookmark,
    CustomReminder,
    DueQuestion,
    FeedbackLog,
    ReviewHistoryEntry,
    SchedulingState,
)
from revhub.domain.srs.ports import (
    BookmarkStore,
    PreferenceStore,
    ReviewHistoryStore,
    TestResultStore,
)

from .algorithm import initial_srs_state, update_srs_state, validate_rating
from .clock import SrsClock
from .due import ShiftedBookmark, select_due, shift_bookmark
from .feedback_ledger import ReviewFeedbackLedger, ReviewOutcome
from .pacing import PacedSchedule, repace_bookmark

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkUpdateResult:
    updated_count: int
    due_count: int  # newly due for pacing, now due for delay


@dataclass(frozen=True)
class ReviewLogResult:
    previous_srs_state: SchedulingState
    updated_srs_state: SchedulingState
    custom_reminder_cleared: bool


def parse_iso_date(value: str | date | None, field_name: str = "date") -> date | None:
    """
    Parse a YYYY-MM-DD string.

    Raises:
        ValidationError: On any other format.
    """
    if value is None or isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field_name} {value!r}. Expected YYYY-MM-DD") from None


class SrsService:
    """
    Application service for spaced-repetition scheduling.

    Follows Dependency Inversion: depends on the store ports, not on
    concrete adapters.
    """

    def __init__(
        self,
        bookmarks: BookmarkStore,
        results: TestResultStore,
        preferences: PreferenceStore,
        history: ReviewHistoryStore,
        clock: SrsClock | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self._bookmarks = bookmarks
        self._results = results
        self._prefs = preferences
        self._history = history
        self._clock = clock or SrsClock()
        self._batch_size = batch_size
        self._locks = KeyedLock()
        self.ledger = ReviewFeedbackLedger(bookmarks, results, self._clock, self._locks)

    # ------------------------------------------------------------------
    # Session feedback
    # ------------------------------------------------------------------

    async def submit_review(
        self, result_id: str, question_id: str, user_id: str, rating: object
    ) -> ReviewOutcome:
        """Rate a question inside a test-result review session."""
        validated = validate_rating(rating)
        return await self.ledger.submit(result_id, user_id, question_id, validated)

    async def undo_review(self, result_id: str, question_id: str, user_id: str) -> FeedbackLog:
        return await self.ledger.undo(result_id, user_id, question_id)

    async def get_feedback_log(self, result_id: str, user_id: str) -> FeedbackLog:
        return await self.ledger.get_log(result_id, user_id)

    # ------------------------------------------------------------------
    # Due set
    # ------------------------------------------------------------------

    async def get_due_questions(self, user_id: str, today: date | None = None) -> list[DueQuestion]:
        today = today or self._clock.today()
        bookmarks = await self._bookmarks.list_bookmarks(user_id)
        return select_due(bookmarks, today)

    async def get_due_count(self, user_id: str, today: date | None = None) -> int:
        return len(await self.get_due_questions(user_id, today))

    # ------------------------------------------------------------------
    # Bulk updates
    # ------------------------------------------------------------------

    async def get_pacing(self, user_id: str) -> float:
        pacing = await self._prefs.get_pacing(user_id)
        return DEFAULT_PACING if pacing is None else pacing

    async def update_pacing(self, user_id: str, pacing: object) -> BulkUpdateResult:
        """
        Store a new pacing mode and rescale every bookmark of the user.

        Raises:
            ValidationError: If pacing is not a number in [-1, 1].
        """
        if isinstance(pacing, bool) or not isinstance(pacing, int | float):
            raise ValidationError("Pacing mode must be a number")
        if not MIN_PACING <= pacing <= MAX_PACING:
            raise ValidationError("Pacing mode must be between -1.00 and 1.00")
        pacing = float(pacing)

        await self._prefs.set_pacing(user_id, pacing)
        logger.info(f"Updating SRS pacing for user {user_id} to {pacing}")

        today = self._clock.today()
        return await self._apply_in_batches(
            user_id, lambda b: repace_bookmark(b, pacing, today)
        )

    async def delay_all_reviews(self, user_id: str, delta_days: object) -> BulkUpdateResult:
        """
        Shift every review date of the user by delta_days (negative advances).

        Raises:
            ValidationError: If delta_days is zero, not an integer, or beyond a year.
        """
        if isinstance(delta_days, bool) or not isinstance(delta_days, int):
            raise ValidationError("Delay days must be an integer")
        if delta_days == 0 or abs(delta_days) > MAX_DELAY_DAYS:
            raise ValidationError(
                f"Delay days must be non-zero and between -{MAX_DELAY_DAYS} and {MAX_DELAY_DAYS}"
            )

        logger.info(f"Shifting all reviews by {delta_days} days for user {user_id}")
        today = self._clock.today()
        return await self._apply_in_batches(
            user_id, lambda b: shift_bookmark(b, delta_days, today)
        )

    async def _apply_in_batches(
        self, user_id: str, transform: Callable[[Bookmark], PacedSchedule | ShiftedBookmark]
    ) -> BulkUpdateResult:
        bookmarks = await self._bookmarks.list_bookmarks(user_id)
        if not bookmarks:
            logger.info(f"No bookmarks to update for user {user_id}")
            return BulkUpdateResult(updated_count=0, due_count=0)

        updated = 0
        due = 0
        for start in range(0, len(bookmarks), self._batch_size):
            batch = []
            for bookmark in bookmarks[start : start + self._batch_size]:
                result = transform(bookmark)
                batch.append(result.bookmark)
                due += result.became_due
            await self._bookmarks.bulk_update(batch)
            updated += len(batch)
            logger.debug(f"Updated batch {start // self._batch_size + 1} ({len(batch)} bookmarks)")

        logger.info(f"Updated {updated} bookmarks for user {user_id} ({due} now due)")
        return BulkUpdateResult(updated_count=updated, due_count=due)

    # ------------------------------------------------------------------
    # Bookmarks and reminders
    # ------------------------------------------------------------------

    async def create_bookmark(self, user_id: str, question_id: str) -> Bookmark:
        """Bookmark a question with the default schedule. Returns the existing one if present."""
        existing = await self._bookmarks.get_bookmark(user_id, question_id)
        if existing is not None:
            logger.info(f"Bookmark already exists for {question_id}")
            return existing

        today = self._clock.today()
        bookmark = Bookmark(
            id=generate_bookmark_id(),
            user_id=user_id,
            question_id=question_id,
            state=initial_srs_state(today),
            created_at=today,
        )
        await self._bookmarks.add_bookmark(bookmark)
        logger.info(f"Bookmarked {question_id} for user {user_id} as {bookmark.id}")
        return bookmark

    async def remove_bookmark(self, user_id: str, bookmark_id: str) -> None:
        if not await self._bookmarks.delete_bookmark(user_id, bookmark_id):
            raise NotFoundError(f"Bookmark {bookmark_id} not found")

    async def set_custom_reminder(
        self,
        user_id: str,
        bookmark_id: str,
        active: bool,
        remind_on: str | date | None = None,
    ) -> CustomReminder:
        """
        Enable or disable the custom reminder of a bookmark.

        Raises:
            ValidationError: If an active reminder has no date, a malformed
                date, or a date in the past.
            NotFoundError: If the bookmark does not exist.
        """
        if not isinstance(active, bool):
            raise ValidationError("active must be a boolean")

        reminder = CustomReminder()
        if active:
            if remind_on is None:
                raise ValidationError("Custom review date is required when the reminder is active")
            day = parse_iso_date(remind_on, "custom review date")
            if day < self._clock.today():
                raise ValidationError("Custom reminder date cannot be in the past")
            reminder = CustomReminder(active=True, date=day)

        bookmark = await self._bookmarks.get_bookmark_by_id(user_id, bookmark_id)
        if bookmark is None:
            raise NotFoundError(f"Bookmark {bookmark_id} not found")

        await self._bookmarks.update_reminder(bookmark.id, reminder)
        logger.info(f"Custom reminder for {bookmark_id}: {reminder}")
        return reminder

    async def log_review(self, user_id: str, bookmark_ref: str, rating: object) -> ReviewLogResult:
        """
        Rate a bookmark from the revision hub, outside any test-result session.

        bookmark_ref may be a bookmark ID or a question ID. An active custom
        reminder is switched off and the bookmark returns to SRS scheduling.
        """
        validated = validate_rating(rating)

        bookmark = await self._bookmarks.get_bookmark_by_id(user_id, bookmark_ref)
        if bookmark is None:
            bookmark = await self._bookmarks.get_bookmark(user_id, bookmark_ref)
        if bookmark is None:
            raise NotFoundError(f"Bookmark {bookmark_ref} not found")

        async with self._locks.hold(("bookmark", bookmark.id)):
            # re-read under the lock so concurrent reviews see each other's writes
            bookmark = await self._bookmarks.get_bookmark_by_id(user_id, bookmark.id) or bookmark
            cleared = bookmark.reminder.active
            if cleared:
                await self._bookmarks.update_reminder(bookmark.id, CustomReminder())

            previous = bookmark.state
            updated = update_srs_state(previous, validated, self._clock.today())
            await self._bookmarks.update_state(bookmark.id, updated)

        await self._history.add_review(
            ReviewHistoryEntry(
                user_id=user_id,
                bookmark_id=bookmark.id,
                question_id=bookmark.question_id,
                rating=int(validated),
                interval_at_review=previous.interval,
                reviewed_at=self._clock.now(),
            )
        )
        logger.info(f"Logged review {int(validated)} for {bookmark.id}, next {updated.next_review_date}")
        return ReviewLogResult(
            previous_srs_state=previous,
            updated_srs_state=updated,
            custom_reminder_cleared=cleared,
        )

