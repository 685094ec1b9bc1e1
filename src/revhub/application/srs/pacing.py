"""
Non-linear pacing transform.

Rescales an interval according to the user's pacing dial (-1.00 .. +1.00):
negative values compress intervals (intensive study), positive values stretch
them (relaxed study). The effect is strongest on short intervals and tapers
on long ones so that short gaps never collapse to zero and long gaps never
balloon.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date

from revhub.domain.constants import MAX_PACING, MIN_PACING
from revhub.domain.srs.models import Bookmark, SchedulingState

from .clock import add_days, days_between

logger = logging.getLogger(__name__)


def apply_pacing_to_interval(baseline: int, pacing: float) -> int:
    """
    Adjust a baseline interval by the user's pacing preference.

    Args:
        baseline: Interval in days as computed by the scheduler.
        pacing: Pacing mode; clamped to [-1, 1]. 0 returns baseline unchanged.

    Returns:
        Adjusted interval in days.
    """
    if pacing == 0 or baseline <= 0:
        return baseline

    pacing = max(MIN_PACING, min(MAX_PACING, pacing))
    if pacing < 0:
        return _compress(baseline, abs(pacing))
    return _stretch(baseline, pacing)


def _compress(baseline: int, intensity: float) -> int:
    if baseline <= 3:
        band = 0.3
    elif baseline <= 14:
        band = 0.4
    elif baseline <= 30:
        band = 0.5
    else:
        band = 0.5 + 0.3 * math.exp(-baseline / 50)

    return max(1, math.ceil(baseline * (1 - intensity * band)))


def _stretch(baseline: int, relaxation: float) -> int:
    if baseline <= 3:
        band = 0.5
    elif baseline <= 14:
        band = 0.6
    elif baseline <= 30:
        band = 0.5
    elif baseline <= 60:
        band = 0.4 + 0.3 * math.exp(-baseline / 40)
    else:
        band = 0.3 * math.exp(-baseline / 60)

    return math.ceil(baseline * (1 + relaxation * band))


def calculate_paced_review_date(interval: int, from_date: date, today: date) -> date:
    """Add interval days to from_date, never returning a date before today."""
    return max(add_days(from_date, interval), today)


@dataclass(frozen=True)
class PacedSchedule:
    bookmark: Bookmark
    became_due: bool


def reference_date(bookmark: Bookmark) -> date | None:
    """The review date that produced the stored interval."""
    state = bookmark.state
    if state.next_review_date is not None:
        return add_days(state.next_review_date, -state.interval)
    return bookmark.created_at


def repace_bookmark(bookmark: Bookmark, pacing: float, today: date) -> PacedSchedule:
    """
    Rescale one bookmark's stored interval and reschedule it.

    The stored interval is the baseline, so successive pacing changes
    compound. Days already elapsed since the interval was set are credited
    against the new interval.
    """
    state = bookmark.state
    adjusted = apply_pacing_to_interval(state.interval, pacing)

    ref = reference_date(bookmark) or today
    days_since_review = days_between(ref, today)
    days_until_next = max(0, adjusted - days_since_review)
    next_date = calculate_paced_review_date(days_until_next, today, today)

    was_due = state.next_review_date is None or state.next_review_date <= today
    updated = bookmark.with_state(
        SchedulingState(
            repetitions=state.repetitions,
            ease_factor=state.ease_factor,
            interval=adjusted,
            next_review_date=next_date,
        )
    )
    logger.debug(
        f"Repaced {bookmark.id}: interval {state.interval} -> {adjusted}, "
        f"next {state.next_review_date} -> {next_date}"
    )
    return PacedSchedule(bookmark=updated, became_due=(not was_due and next_date == today))
