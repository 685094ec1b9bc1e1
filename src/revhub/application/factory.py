"""
Store Factory
Centralizes the logic for selecting the persistence backend.
"""

import logging
from dataclasses import dataclass

from revhub.application.config import AppConfig
from revhub.application.srs.clock import SrsClock
from revhub.application.srs.service import SrsService
from revhub.application.stats.service import ReviewStatsService
from revhub.domain.srs.ports import (
    BookmarkStore,
    PreferenceStore,
    ReviewHistoryStore,
    TestResultStore,
)
from revhub.infrastructure.adapters.memory_store import (
    InMemoryBookmarkStore,
    InMemoryPreferenceStore,
    InMemoryReviewHistoryStore,
    InMemoryTestResultStore,
)
from revhub.infrastructure.adapters.sqlite_store import (
    SqliteBookmarkStore,
    SqlitePreferenceStore,
    SqliteReviewHistoryStore,
    SqliteTestResultStore,
    init_db,
)

logger = logging.getLogger(__name__)


@dataclass
class Stores:
    bookmarks: BookmarkStore
    results: TestResultStore
    preferences: PreferenceStore
    history: ReviewHistoryStore


@dataclass
class Services:
    srs: SrsService
    stats: ReviewStatsService


def get_stores(config: AppConfig) -> Stores:
    """
    Returns the store implementations for the configured backend.
    """
    if config.backend == "memory":
        logger.info("Backend: memory")
        return Stores(
            bookmarks=InMemoryBookmarkStore(),
            results=InMemoryTestResultStore(),
            preferences=InMemoryPreferenceStore(),
            history=InMemoryReviewHistoryStore(),
        )

    logger.info(f"Backend: sqlite ({config.database_path})")
    conn = init_db(config.database_path)
    return Stores(
        bookmarks=SqliteBookmarkStore(conn),
        results=SqliteTestResultStore(conn),
        preferences=SqlitePreferenceStore(conn),
        history=SqliteReviewHistoryStore(conn),
    )


def build_services(config: AppConfig, clock: SrsClock | None = None) -> Services:
    stores = get_stores(config)
    clock = clock or SrsClock()
    return Services(
        srs=SrsService(
            bookmarks=stores.bookmarks,
            results=stores.results,
            preferences=stores.preferences,
            history=stores.history,
            clock=clock,
            batch_size=config.batch_size,
        ),
        stats=ReviewStatsService(stores.history, clock=clock),
    )
