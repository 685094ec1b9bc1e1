# Domain SRS Package
from .models import (
    Bookmark,
    CustomReminder,
    DueQuestion,
    FeedbackEntry,
    FeedbackLog,
    PerformanceRating,
    ReviewHistoryEntry,
    SchedulingState,
)
from .ports import BookmarkStore, PreferenceStore, ReviewHistoryStore, TestResultStore

__all__ = [
    "Bookmark",
    "CustomReminder",
    "DueQuestion",
    "FeedbackEntry",
    "FeedbackLog",
    "PerformanceRating",
    "ReviewHistoryEntry",
    "SchedulingState",
    "BookmarkStore",
    "TestResultStore",
    "PreferenceStore",
    "ReviewHistoryStore",
]
