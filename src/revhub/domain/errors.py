"""Error taxonomy shared by every layer."""

from typing import Any


class RevhubError(Exception):
    """Base class for all revhub errors."""


class ValidationError(RevhubError):
    """Input was rejected before any state was touched."""


class NotFoundError(RevhubError):
    """A bookmark, test result or ledger target does not exist for the user."""


class PersistenceError(RevhubError):
    """
    A store write failed.

    `pending` holds the value that was being written (e.g. a computed
    SchedulingState) so callers can retry the write without recomputing it.
    """

    def __init__(self, message: str, pending: Any = None):
        super().__init__(message)
        self.pending = pending
