from datetime import date, timedelta

import pytest

from revhub.application.srs.pacing import (
    apply_pacing_to_interval,
    calculate_paced_review_date,
    reference_date,
    repace_bookmark,
)
from revhub.domain.srs.models import SchedulingState

TODAY = date(2024, 3, 10)
PACINGS = [-1.0, -0.75, -0.5, -0.25, 0.0, 0.25, 0.5, 0.75, 1.0]


@pytest.mark.parametrize("baseline", [0, 1, 3, 6, 15, 45, 200])
def test_zero_pacing_is_identity(baseline):
    assert apply_pacing_to_interval(baseline, 0) == baseline


@pytest.mark.parametrize(
    "baseline, pacing, expected",
    [
        (1, -1.0, 1),
        (2, -1.0, 2),
        (10, -1.0, 6),
        (20, -1.0, 10),
        (10, 1.0, 16),
        (20, 1.0, 30),
        (2, 1.0, 3),
    ],
)
def test_band_values(baseline, pacing, expected):
    assert apply_pacing_to_interval(baseline, pacing) == expected


def test_monotone_in_pacing():
    for baseline in range(1, 150):
        results = [apply_pacing_to_interval(baseline, p) for p in PACINGS]
        assert results == sorted(results), baseline


def test_compression_never_below_one_day():
    for baseline in range(1, 150):
        assert apply_pacing_to_interval(baseline, -1.0) >= 1


def test_long_intervals_taper():
    stretched = apply_pacing_to_interval(100, 1.0)
    assert 100 < stretched < 120


def test_pacing_is_clamped():
    assert apply_pacing_to_interval(10, 5) == apply_pacing_to_interval(10, 1.0)
    assert apply_pacing_to_interval(10, -5) == apply_pacing_to_interval(10, -1.0)


def test_paced_review_date_never_in_past():
    assert calculate_paced_review_date(3, TODAY - timedelta(days=10), TODAY) == TODAY
    assert calculate_paced_review_date(3, TODAY, TODAY) == TODAY + timedelta(days=3)


def test_reference_date(make_bookmark):
    scheduled = make_bookmark(
        "q1", state=SchedulingState(2, 2.5, 6, TODAY + timedelta(days=2))
    )
    assert reference_date(scheduled) == TODAY - timedelta(days=4)

    fresh = make_bookmark("q2", created_at=TODAY - timedelta(days=1))
    assert reference_date(fresh) == TODAY - timedelta(days=1)


def test_repace_neutral_keeps_schedule(make_bookmark):
    bookmark = make_bookmark(
        "q1", state=SchedulingState(3, 2.5, 10, TODAY + timedelta(days=4))
    )

    result = repace_bookmark(bookmark, 0.0, TODAY)

    assert result.bookmark.state == bookmark.state
    assert not result.became_due


def test_repace_intensive_credits_elapsed_days(make_bookmark):
    # reviewed six days ago with a ten day interval
    bookmark = make_bookmark(
        "q1", state=SchedulingState(3, 2.5, 10, TODAY + timedelta(days=4))
    )

    result = repace_bookmark(bookmark, -1.0, TODAY)

    assert result.bookmark.state.interval == 6
    assert result.bookmark.state.next_review_date == TODAY
    assert result.became_due
    assert result.bookmark.state.repetitions == 3
    assert result.bookmark.state.ease_factor == 2.5


def test_repace_relaxed_pushes_out(make_bookmark):
    bookmark = make_bookmark(
        "q1", state=SchedulingState(3, 2.5, 10, TODAY + timedelta(days=4))
    )

    result = repace_bookmark(bookmark, 1.0, TODAY)

    assert result.bookmark.state.interval == 16
    assert result.bookmark.state.next_review_date == TODAY + timedelta(days=10)
    assert not result.became_due


def test_repace_overdue_stays_today_and_is_not_newly_due(make_bookmark):
    bookmark = make_bookmark(
        "q1", state=SchedulingState(2, 2.5, 5, TODAY - timedelta(days=20))
    )

    result = repace_bookmark(bookmark, 1.0, TODAY)

    assert result.bookmark.state.next_review_date == TODAY
    assert not result.became_due
