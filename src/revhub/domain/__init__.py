# Domain Package
from .errors import NotFoundError, PersistenceError, RevhubError, ValidationError

__all__ = ["RevhubError", "ValidationError", "NotFoundError", "PersistenceError"]
