"""Calendar helpers shared by the scheduler, pacing and due-set logic."""

from datetime import date, datetime, timedelta, timezone


def add_days(d: date, days: int) -> date:
    return d + timedelta(days=days)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative if end is earlier)."""
    return (end - start).days


class SrsClock:
    """
    Source of "today" for scheduling.

    Bulk operations read today() once and thread that value through every
    item so one call never straddles midnight.
    """

    def today(self) -> date:
        return datetime.now(timezone.utc).date()

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(SrsClock):
    """A clock pinned to one calendar day."""

    def __init__(self, today: date):
        self._today = today

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return datetime.combine(self._today, datetime.now(timezone.utc).timetz())
