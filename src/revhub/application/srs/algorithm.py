"""
Modified SM-2 scheduler.

Maps a scheduling state and a performance rating to the next state. This is
a pure computation module with no I/O.

Ratings:
    1 = Again (forgot / incorrect)
    2 = Hard (correct but difficult)
    3 = Good (correct with some effort)
    4 = Easy (instant recall)

Again and Hard are lapses: the repetition streak resets and the question
comes back tomorrow. Good and Easy grow the interval 1 -> 6 -> interval * EF.
"""

import math
from datetime import date

from revhub.domain.constants import (
    EASE_PRECISION,
    FIRST_INTERVAL,
    LAPSE_EASE_PENALTY,
    LAPSE_INTERVAL,
    MIN_EASE_FACTOR,
    SECOND_INTERVAL,
)
from revhub.domain.errors import ValidationError
from revhub.domain.srs.models import PerformanceRating, SchedulingState

from .clock import add_days

# Position of each success rating on SM-2's 0-5 quality scale.
SM2_QUALITY = {
    PerformanceRating.GOOD: 3,
    PerformanceRating.EASY: 5,
}


def validate_rating(rating: object) -> PerformanceRating:
    """
    Coerce a caller-supplied rating into a PerformanceRating.

    Raises:
        ValidationError: If the rating is not one of 1, 2, 3, 4.
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"Rating must be an integer between 1 and 4, got {rating!r}")
    try:
        return PerformanceRating(rating)
    except ValueError:
        raise ValidationError(f"Rating must be between 1 and 4, got {rating}") from None


def next_ease_factor(ease_factor: float, quality: int) -> float:
    """EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3."""
    gap = 5 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - gap * (0.08 + gap * 0.02)))


def update_srs_state(
    state: SchedulingState, rating: PerformanceRating | int, today: date
) -> SchedulingState:
    """
    Apply one review to a scheduling state.

    Must be called with the state as it was immediately before this rating;
    the review ledger guarantees that for session feedback.

    Args:
        state: Current scheduling state.
        rating: Performance rating, already validated.
        today: The review date; the next review is scheduled relative to it.

    Returns:
        The new state, with ease_factor rounded to stored precision.
    """
    rating = PerformanceRating(rating)

    if rating.is_lapse:
        repetitions = 0
        ease_factor = max(MIN_EASE_FACTOR, state.ease_factor - LAPSE_EASE_PENALTY)
        interval = LAPSE_INTERVAL
    else:
        repetitions = state.repetitions + 1
        ease_factor = next_ease_factor(state.ease_factor, SM2_QUALITY[rating])

        if repetitions == 1:
            interval = FIRST_INTERVAL
        elif repetitions == 2:
            interval = SECOND_INTERVAL
        else:
            interval = max(1, math.ceil(state.interval * ease_factor))

    return SchedulingState(
        repetitions=repetitions,
        ease_factor=round(ease_factor, EASE_PRECISION),
        interval=interval,
        next_review_date=add_days(today, interval),
    )


def initial_srs_state(today: date) -> SchedulingState:
    """State of a freshly bookmarked question: default ease, due today."""
    return SchedulingState(next_review_date=today)
