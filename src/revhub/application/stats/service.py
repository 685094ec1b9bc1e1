"""
Review Stats Service: Application layer orchestrator.

Coordinates fetching the review history and turning it into retention and
streak metrics.
"""

import logging
from datetime import timedelta

from revhub.application.srs.clock import SrsClock
from revhub.domain.constants import RETENTION_LONG_WINDOW_DAYS
from revhub.domain.srs.ports import ReviewHistoryStore

from .metrics_calculator import MetricsCalculator, RetentionStats, StreakStats

logger = logging.getLogger(__name__)


class ReviewStatsService:
    """
    Application service for review analytics.

    Depends on the ReviewHistoryStore abstraction, not concrete adapters.
    """

    def __init__(
        self,
        history: ReviewHistoryStore,
        calculator: MetricsCalculator | None = None,
        clock: SrsClock | None = None,
    ):
        """
        Args:
            history: The store (port) holding the review log.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._history = history
        self._calc = calculator or MetricsCalculator()
        self._clock = clock or SrsClock()

    async def get_retention(self, user_id: str) -> RetentionStats:
        """Retention over the last 30 days, split by maturity and window."""
        now = self._clock.now()
        reviews = await self._history.list_reviews(
            user_id, since=now - timedelta(days=RETENTION_LONG_WINDOW_DAYS)
        )
        logger.debug(f"Computing retention for {user_id} from {len(reviews)} reviews")
        return self._calc.retention(reviews, now)

    async def get_streak(self, user_id: str) -> StreakStats:
        reviews = await self._history.list_reviews(user_id)
        return self._calc.streak(reviews, self._clock.today())
