from datetime import date

import pytest

from revhub.application.srs.clock import FixedClock
from revhub.application.srs.service import SrsService
from revhub.application.stats.service import ReviewStatsService
from revhub.domain.srs.models import Bookmark, SchedulingState
from revhub.infrastructure.adapters.memory_store import (
    InMemoryBookmarkStore,
    InMemoryPreferenceStore,
    InMemoryReviewHistoryStore,
    InMemoryTestResultStore,
)

TODAY = date(2024, 3, 10)


def make_bookmark(
    question_id: str,
    user_id: str = "user-1",
    state: SchedulingState | None = None,
    **kwargs,
) -> Bookmark:
    return Bookmark(
        id=f"bm-{question_id}",
        user_id=user_id,
        question_id=question_id,
        state=state or SchedulingState(),
        created_at=kwargs.pop("created_at", date(2024, 1, 1)),
        **kwargs,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock(today):
    return FixedClock(today)


@pytest.fixture
def bookmark_store():
    return InMemoryBookmarkStore()


@pytest.fixture
def result_store():
    store = InMemoryTestResultStore()
    store.add_result("result-1", "user-1")
    return store


@pytest.fixture
def preference_store():
    return InMemoryPreferenceStore()


@pytest.fixture
def history_store():
    return InMemoryReviewHistoryStore()


@pytest.fixture
def service(bookmark_store, result_store, preference_store, history_store, clock):
    return SrsService(
        bookmarks=bookmark_store,
        results=result_store,
        preferences=preference_store,
        history=history_store,
        clock=clock,
    )


@pytest.fixture
def stats_service(history_store, clock):
    return ReviewStatsService(history_store, clock=clock)


@pytest.fixture(name="make_bookmark")
def make_bookmark_fixture():
    return make_bookmark
