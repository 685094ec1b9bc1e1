"""
Metrics calculator for deriving insights from the review history.

This is a pure computation module with no I/O.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from revhub.domain.constants import (
    ACTIVITY_WINDOW_DAYS,
    MATURE_INTERVAL_DAYS,
    RETENTION_LONG_WINDOW_DAYS,
    RETENTION_SHORT_WINDOW_DAYS,
    SUCCESS_THRESHOLD,
)
from revhub.domain.srs.models import ReviewHistoryEntry


@dataclass
class RetentionStats:
    """
    Retention percentages by question maturity and time window.

    A review is retained when rated Good or Easy. A question is young while
    its interval at review time is under 21 days, mature afterwards. Each
    rate is None when its bucket is empty.
    """

    young_7_days: int | None
    mature_7_days: int | None
    young_30_days: int | None
    mature_30_days: int | None
    overall_retention: int


@dataclass
class DailyActivity:
    date: date
    count: int


@dataclass
class StreakStats:
    current_streak: int
    longest_streak: int
    last_90_days: list[DailyActivity] = field(default_factory=list)


class _Bucket:
    def __init__(self):
        self.retained = 0
        self.total = 0

    def add(self, retained: bool) -> None:
        self.total += 1
        self.retained += retained

    def rate(self) -> int | None:
        if self.total == 0:
            return None
        return round(self.retained / self.total * 100)


class MetricsCalculator:
    """
    Computes retention and streak metrics from review history entries.

    Stateless and side-effect free.
    """

    def retention(self, reviews: list[ReviewHistoryEntry], now: datetime) -> RetentionStats:
        short_cutoff = now - timedelta(days=RETENTION_SHORT_WINDOW_DAYS)
        long_cutoff = now - timedelta(days=RETENTION_LONG_WINDOW_DAYS)

        young7, mature7, young30, mature30 = _Bucket(), _Bucket(), _Bucket(), _Bucket()
        overall = _Bucket()

        for review in reviews:
            if review.reviewed_at < long_cutoff:
                continue
            retained = review.rating >= SUCCESS_THRESHOLD
            young = review.interval_at_review < MATURE_INTERVAL_DAYS
            overall.add(retained)

            if review.reviewed_at >= short_cutoff:
                (young7 if young else mature7).add(retained)
            (young30 if young else mature30).add(retained)

        return RetentionStats(
            young_7_days=young7.rate(),
            mature_7_days=mature7.rate(),
            young_30_days=young30.rate(),
            mature_30_days=mature30.rate(),
            overall_retention=overall.rate() or 0,
        )

    def streak(self, reviews: list[ReviewHistoryEntry], today: date) -> StreakStats:
        """
        Current streak counts consecutive review days ending today; a day
        without reviews ends it. Longest streak covers the whole history.
        """
        per_day = Counter(r.reviewed_at.date() for r in reviews)

        current = 0
        day = today
        while per_day.get(day, 0) > 0:
            current += 1
            day -= timedelta(days=1)

        longest = 0
        run = 0
        previous: date | None = None
        for day in sorted(per_day):
            if previous is not None and (day - previous).days == 1:
                run += 1
            else:
                run = 1
            longest = max(longest, run)
            previous = day

        window = [
            DailyActivity(date=d, count=per_day.get(d, 0))
            for d in (today - timedelta(days=i) for i in range(ACTIVITY_WINDOW_DAYS - 1, -1, -1))
        ]
        return StreakStats(current_streak=current, longest_streak=longest, last_90_days=window)
