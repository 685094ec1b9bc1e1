"""
Ports (interfaces) for SRS persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import (
    Bookmark,
    CustomReminder,
    FeedbackLog,
    ReviewHistoryEntry,
    SchedulingState,
)


class BookmarkStore(ABC):
    """
    Port for bookmarked questions and their scheduling state.

    Implementations:
        - InMemoryBookmarkStore: Process-local dict, used by tests and the memory backend.
        - SqliteBookmarkStore: Persists to a SQLite database file.
    """

    @abstractmethod
    async def get_bookmark(self, user_id: str, question_id: str) -> Bookmark | None:
        """Fetch the user's bookmark for a question, or None."""
        pass

    @abstractmethod
    async def get_bookmark_by_id(self, user_id: str, bookmark_id: str) -> Bookmark | None:
        """Fetch a bookmark by its ID, scoped to the owning user."""
        pass

    @abstractmethod
    async def list_bookmarks(self, user_id: str) -> list[Bookmark]:
        """List every bookmark owned by the user."""
        pass

    @abstractmethod
    async def add_bookmark(self, bookmark: Bookmark) -> None:
        pass

    @abstractmethod
    async def delete_bookmark(self, user_id: str, bookmark_id: str) -> bool:
        """
        Remove a bookmark.

        Returns:
            False if the user had no such bookmark.
        """
        pass

    @abstractmethod
    async def update_state(self, bookmark_id: str, state: SchedulingState) -> None:
        """
        Persist a new scheduling state.

        Raises:
            PersistenceError: If the write fails.
        """
        pass

    @abstractmethod
    async def update_reminder(self, bookmark_id: str, reminder: CustomReminder) -> None:
        pass

    @abstractmethod
    async def bulk_update(self, bookmarks: list[Bookmark]) -> None:
        """
        Write scheduling state and reminder fields for a batch of bookmarks.

        Raises:
            PersistenceError: If the batch could not be written.
        """
        pass


class TestResultStore(ABC):
    """Port for the per-test-result feedback ledger."""

    __test__ = False  # not a pytest test class

    @abstractmethod
    async def get_feedback_log(self, result_id: str, user_id: str) -> FeedbackLog | None:
        """
        Fetch the feedback ledger of a test result owned by the user.

        Returns:
            None if the result does not exist or belongs to someone else,
            an empty dict if it exists but has no feedback yet.
        """
        pass

    @abstractmethod
    async def save_feedback_log(self, result_id: str, user_id: str, log: FeedbackLog) -> None:
        """
        Replace the feedback ledger of a test result.

        Raises:
            PersistenceError: If the write fails.
        """
        pass


class PreferenceStore(ABC):
    """Port for per-user SRS preferences."""

    @abstractmethod
    async def get_pacing(self, user_id: str) -> float | None:
        """Return the stored pacing mode, or None if the user never set one."""
        pass

    @abstractmethod
    async def set_pacing(self, user_id: str, pacing: float) -> None:
        pass


class ReviewHistoryStore(ABC):
    """Port for the review log that feeds analytics."""

    @abstractmethod
    async def add_review(self, entry: ReviewHistoryEntry) -> None:
        pass

    @abstractmethod
    async def list_reviews(
        self, user_id: str, since: datetime | None = None
    ) -> list[ReviewHistoryEntry]:
        """
        Fetch the user's reviews.

        Args:
            since: Only return reviews at or after this instant.

        Returns:
            Entries sorted by reviewed_at ascending.
        """
        pass
