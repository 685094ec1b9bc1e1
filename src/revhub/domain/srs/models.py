"""
Domain models for SRS scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import IntEnum
from typing import Any

from revhub.domain.constants import DEFAULT_EASE_FACTOR, SUCCESS_THRESHOLD


class PerformanceRating(IntEnum):
    """Button pressed after reviewing a question."""

    AGAIN = 1
    HARD = 2
    GOOD = 3
    EASY = 4

    @property
    def is_lapse(self) -> bool:
        return self < SUCCESS_THRESHOLD

    @property
    def label(self) -> str:
        return self.name.capitalize()


def _parse_date(value: Any) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def _format_date(value: date | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class SchedulingState:
    """
    SM-2 scheduling state of one bookmark.

    Attributes:
        repetitions: Consecutive successful recalls; 0 after a lapse.
        ease_factor: Difficulty multiplier, never below 1.3.
        interval: Last computed gap between reviews (days).
        next_review_date: Scheduled review date; None means due immediately.
    """

    repetitions: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = 0
    next_review_date: date | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "repetitions": self.repetitions,
            "ease_factor": self.ease_factor,
            "interval": self.interval,
            "next_review_date": _format_date(self.next_review_date),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SchedulingState":
        return cls(
            repetitions=int(data["repetitions"]),
            ease_factor=float(data["ease_factor"]),
            interval=int(data["interval"]),
            next_review_date=_parse_date(data.get("next_review_date")),
        )


@dataclass(frozen=True)
class CustomReminder:
    """
    A user-chosen review date that overrides SRS scheduling for due checks.

    It never alters the SchedulingState fields.
    """

    active: bool = False
    date: "date | None" = None

    def to_dict(self) -> dict[str, Any]:
        return {"active": self.active, "date": _format_date(self.date)}


@dataclass
class Bookmark:
    """A user's bookmarked question together with its schedule."""

    id: str
    user_id: str
    question_id: str
    state: SchedulingState = field(default_factory=SchedulingState)
    reminder: CustomReminder = field(default_factory=CustomReminder)
    created_at: date | None = None

    def with_state(self, state: SchedulingState) -> "Bookmark":
        return replace(self, state=state)

    def effective_due_date(self) -> date | None:
        """The date that decides due-ness: the reminder date when active, else the SRS date."""
        if self.reminder.active and self.reminder.date is not None:
            return self.reminder.date
        return self.state.next_review_date


@dataclass(frozen=True)
class FeedbackEntry:
    """
    One ledger entry: the latest rating given to a question within a
    review session, plus the state captured before the first rating.
    """

    rating: int
    timestamp: datetime
    original_srs_state: SchedulingState

    def to_dict(self) -> dict[str, Any]:
        return {
            "rating": self.rating,
            "timestamp": self.timestamp.isoformat(),
            "original_srs_state": self.original_srs_state.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeedbackEntry":
        return cls(
            rating=int(data["rating"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            original_srs_state=SchedulingState.from_dict(data["original_srs_state"]),
        )


# question_id -> entry, scoped to one test result
FeedbackLog = dict[str, FeedbackEntry]


def feedback_log_to_dict(log: FeedbackLog) -> dict[str, Any]:
    return {qid: entry.to_dict() for qid, entry in log.items()}


def feedback_log_from_dict(data: dict[str, Any] | None) -> FeedbackLog:
    return {qid: FeedbackEntry.from_dict(raw) for qid, raw in (data or {}).items()}


@dataclass(frozen=True)
class ReviewHistoryEntry:
    """
    A single review log entry used for analytics.

    Attributes:
        interval_at_review: The interval the bookmark had when it was reviewed (days).
    """

    user_id: str
    bookmark_id: str
    question_id: str
    rating: int
    interval_at_review: int
    reviewed_at: datetime


@dataclass(frozen=True)
class DueQuestion:
    bookmark_id: str
    question_id: str
    via_custom_reminder: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "bookmark_id": self.bookmark_id,
            "question_id": self.question_id,
            "via_custom_reminder": self.via_custom_reminder,
        }
