"""
In-memory stores.

Process-local implementations of the store ports. State is lost on restart;
used by tests and by the `memory` backend.
"""

import logging
from dataclasses import replace
from datetime import datetime

from revhub.domain.errors import NotFoundError, ValidationError
from revhub.domain.srs.models import (
    Bookmark,
    CustomReminder,
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

logger = logging.getLogger(__name__)


class InMemoryBookmarkStore(BookmarkStore):
    def __init__(self, bookmarks: list[Bookmark] | None = None):
        self._by_id: dict[str, Bookmark] = {}
        for bookmark in bookmarks or []:
            self._by_id[bookmark.id] = replace(bookmark)

    def _require(self, bookmark_id: str) -> Bookmark:
        try:
            return self._by_id[bookmark_id]
        except KeyError:
            raise NotFoundError(f"Bookmark {bookmark_id} not found") from None

    async def get_bookmark(self, user_id: str, question_id: str) -> Bookmark | None:
        for bookmark in self._by_id.values():
            if bookmark.user_id == user_id and bookmark.question_id == question_id:
                return replace(bookmark)
        return None

    async def get_bookmark_by_id(self, user_id: str, bookmark_id: str) -> Bookmark | None:
        bookmark = self._by_id.get(bookmark_id)
        if bookmark is None or bookmark.user_id != user_id:
            return None
        return replace(bookmark)

    async def list_bookmarks(self, user_id: str) -> list[Bookmark]:
        return [replace(b) for b in self._by_id.values() if b.user_id == user_id]

    async def add_bookmark(self, bookmark: Bookmark) -> None:
        if await self.get_bookmark(bookmark.user_id, bookmark.question_id):
            raise ValidationError(f"Question {bookmark.question_id} is already bookmarked")
        self._by_id[bookmark.id] = replace(bookmark)

    async def delete_bookmark(self, user_id: str, bookmark_id: str) -> bool:
        bookmark = self._by_id.get(bookmark_id)
        if bookmark is None or bookmark.user_id != user_id:
            return False
        del self._by_id[bookmark_id]
        return True

    async def update_state(self, bookmark_id: str, state: SchedulingState) -> None:
        self._require(bookmark_id).state = state

    async def update_reminder(self, bookmark_id: str, reminder: CustomReminder) -> None:
        self._require(bookmark_id).reminder = reminder

    async def bulk_update(self, bookmarks: list[Bookmark]) -> None:
        targets = [(self._require(b.id), b) for b in bookmarks]
        for stored, bookmark in targets:
            stored.state = bookmark.state
            stored.reminder = bookmark.reminder


class InMemoryTestResultStore(TestResultStore):
    def __init__(self):
        # result_id -> (owner, ledger)
        self._results: dict[str, tuple[str, FeedbackLog]] = {}

    def add_result(self, result_id: str, user_id: str) -> None:
        self._results[result_id] = (user_id, {})

    async def get_feedback_log(self, result_id: str, user_id: str) -> FeedbackLog | None:
        found = self._results.get(result_id)
        if found is None or found[0] != user_id:
            return None
        return dict(found[1])

    async def save_feedback_log(self, result_id: str, user_id: str, log: FeedbackLog) -> None:
        found = self._results.get(result_id)
        if found is None or found[0] != user_id:
            raise NotFoundError(f"Test result {result_id} not found")
        self._results[result_id] = (user_id, dict(log))


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self):
        self._pacing: dict[str, float] = {}

    async def get_pacing(self, user_id: str) -> float | None:
        return self._pacing.get(user_id)

    async def set_pacing(self, user_id: str, pacing: float) -> None:
        self._pacing[user_id] = pacing


class InMemoryReviewHistoryStore(ReviewHistoryStore):
    def __init__(self):
        self._entries: list[ReviewHistoryEntry] = []

    async def add_review(self, entry: ReviewHistoryEntry) -> None:
        self._entries.append(entry)

    async def list_reviews(
        self, user_id: str, since: datetime | None = None
    ) -> list[ReviewHistoryEntry]:
        entries = [
            e
            for e in self._entries
            if e.user_id == user_id and (since is None or e.reviewed_at >= since)
        ]
        return sorted(entries, key=lambda e: e.reviewed_at)
