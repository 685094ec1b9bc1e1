"""Centralized constants for revhub.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 ----------
MIN_EASE_FACTOR = 1.3
DEFAULT_EASE_FACTOR = 2.5
LAPSE_EASE_PENALTY = 0.20
LAPSE_INTERVAL = 1
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
SUCCESS_THRESHOLD = 3
EASE_PRECISION = 2

# ---------- Pacing ----------
MIN_PACING = -1.0
MAX_PACING = 1.0
DEFAULT_PACING = 0.0

# ---------- Bulk operations ----------
DEFAULT_BATCH_SIZE = 100
MAX_DELAY_DAYS = 365

# ---------- Analytics ----------
MATURE_INTERVAL_DAYS = 21
RETENTION_SHORT_WINDOW_DAYS = 7
RETENTION_LONG_WINDOW_DAYS = 30
ACTIVITY_WINDOW_DAYS = 90
