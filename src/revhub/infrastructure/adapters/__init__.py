# Infrastructure Store Adapters Package
from .memory_store import (
    InMemoryBookmarkStore,
    InMemoryPreferenceStore,
    InMemoryReviewHistoryStore,
    InMemoryTestResultStore,
)
from .sqlite_store import (
    SqliteBookmarkStore,
    SqlitePreferenceStore,
    SqliteReviewHistoryStore,
    SqliteTestResultStore,
    init_db,
)

__all__ = [
    "InMemoryBookmarkStore",
    "InMemoryTestResultStore",
    "InMemoryPreferenceStore",
    "InMemoryReviewHistoryStore",
    "SqliteBookmarkStore",
    "SqliteTestResultStore",
    "SqlitePreferenceStore",
    "SqliteReviewHistoryStore",
    "init_db",
]
