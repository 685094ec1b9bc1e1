"""Stable IDs for bookmarks."""

from ulid import ULID


def generate_bookmark_id() -> str:
    """Generate a sortable bookmark ID using ULID."""
    return f"bm_{ULID()}"
