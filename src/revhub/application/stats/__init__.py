# Application Stats Package
from .metrics_calculator import DailyActivity, MetricsCalculator, RetentionStats, StreakStats
from .service import ReviewStatsService

__all__ = ["MetricsCalculator", "RetentionStats", "StreakStats", "DailyActivity", "ReviewStatsService"]
