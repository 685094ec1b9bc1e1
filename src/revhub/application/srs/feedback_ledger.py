"""
Review feedback ledger.

Each test result carries a map of question_id -> FeedbackEntry. The entry
keeps the scheduling state captured before the first rating in that session,
and every later rating is replayed from that snapshot. Re-rating a question
therefore yields at most one net SM-2 transition per (result, question), and
undo restores the snapshot verbatim.
"""

import logging
from dataclasses import dataclass

from revhub.application.locks import KeyedLock
from revhub.domain.errors import NotFoundError, PersistenceError
from revhub.domain.srs.models import (
    Bookmark,
    FeedbackEntry,
    FeedbackLog,
    PerformanceRating,
    SchedulingState,
)
from revhub.domain.srs.ports import BookmarkStore, TestResultStore

from .algorithm import update_srs_state
from .clock import SrsClock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewOutcome:
    updated_srs_state: SchedulingState
    feedback_log: FeedbackLog


class ReviewFeedbackLedger:
    """
    Applies and reverts session feedback against the bookmark store.

    Ledger writes for one test result are serialised with a per-result lock;
    the whole ledger is a single record, so concurrent ratings of different
    questions in the same session would otherwise overwrite each other.
    """

    def __init__(
        self,
        bookmarks: BookmarkStore,
        results: TestResultStore,
        clock: SrsClock | None = None,
        locks: KeyedLock | None = None,
    ):
        self._bookmarks = bookmarks
        self._results = results
        self._clock = clock or SrsClock()
        self._locks = locks or KeyedLock()

    async def get_log(self, result_id: str, user_id: str) -> FeedbackLog:
        log = await self._results.get_feedback_log(result_id, user_id)
        if log is None:
            raise NotFoundError(f"Test result {result_id} not found")
        return log

    async def _get_bookmark(self, user_id: str, question_id: str) -> Bookmark:
        bookmark = await self._bookmarks.get_bookmark(user_id, question_id)
        if bookmark is None:
            raise NotFoundError(f"Bookmark not found for question {question_id}")
        return bookmark

    async def submit(
        self,
        result_id: str,
        user_id: str,
        question_id: str,
        rating: PerformanceRating,
    ) -> ReviewOutcome:
        """
        Record a rating and reschedule the bookmark from the session snapshot.

        Raises:
            NotFoundError: If the test result or the bookmark does not exist.
            PersistenceError: If a store write fails. `pending` carries the
                computed state, which is safe to write again as is. The
                ledger is saved before the bookmark, so resubmitting the
                same rating converges on one transition.
        """
        async with self._locks.hold(result_id):
            log = dict(await self.get_log(result_id, user_id))
            bookmark = await self._get_bookmark(user_id, question_id)

            existing = log.get(question_id)
            if existing is not None:
                original = existing.original_srs_state
                logger.debug(f"Re-rating {question_id} in {result_id}, replaying from snapshot")
            else:
                original = bookmark.state

            new_state = update_srs_state(original, rating, self._clock.today())
            log[question_id] = FeedbackEntry(
                rating=int(rating),
                timestamp=self._clock.now(),
                original_srs_state=original,
            )

            # snapshot first: a retry after any failure below replays from it
            try:
                await self._results.save_feedback_log(result_id, user_id, log)
                await self._bookmarks.update_state(bookmark.id, new_state)
            except PersistenceError as e:
                e.pending = new_state
                raise

        logger.info(
            f"Feedback {int(rating)} for {question_id} in {result_id}: "
            f"interval {original.interval} -> {new_state.interval}"
        )
        return ReviewOutcome(updated_srs_state=new_state, feedback_log=log)

    async def undo(self, result_id: str, user_id: str, question_id: str) -> FeedbackLog:
        """
        Restore the pre-session state of a question and drop its ledger entry.

        Undoing a question that was never rated is a successful no-op.

        Raises:
            NotFoundError: If the test result, or the bookmark of a rated
                question, does not exist.
        """
        async with self._locks.hold(result_id):
            log = dict(await self.get_log(result_id, user_id))
            entry = log.get(question_id)
            if entry is None:
                logger.info(f"Nothing to undo for {question_id} in {result_id}")
                return log

            bookmark = await self._get_bookmark(user_id, question_id)
            await self._bookmarks.update_state(bookmark.id, entry.original_srs_state)

            del log[question_id]
            await self._results.save_feedback_log(result_id, user_id, log)

        logger.info(f"Undid feedback for {question_id} in {result_id}")
        return log
