# Application SRS Package
from .algorithm import initial_srs_state, update_srs_state, validate_rating
from .clock import FixedClock, SrsClock
from .due import is_due, select_due, shift_bookmark
from .feedback_ledger import ReviewFeedbackLedger, ReviewOutcome
from .pacing import apply_pacing_to_interval, calculate_paced_review_date, repace_bookmark
from .service import BulkUpdateResult, ReviewLogResult, SrsService

__all__ = [
    "update_srs_state",
    "initial_srs_state",
    "validate_rating",
    "SrsClock",
    "FixedClock",
    "is_due",
    "select_due",
    "shift_bookmark",
    "ReviewFeedbackLedger",
    "ReviewOutcome",
    "apply_pacing_to_interval",
    "calculate_paced_review_date",
    "repace_bookmark",
    "SrsService",
    "BulkUpdateResult",
    "ReviewLogResult",
]
