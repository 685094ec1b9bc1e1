"""
SQLite stores: Infrastructure adapters for a local relational database.

Implements the store ports against one SQLite connection. The feedback
ledger is kept as a JSON blob per test result, mirroring the hosted schema.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from revhub.domain.errors import NotFoundError, PersistenceError, RevhubError, ValidationError
from revhub.domain.srs.models import (
    Bookmark,
    CustomReminder,
    FeedbackLog,
    ReviewHistoryEntry,
    SchedulingState,
    feedback_log_from_dict,
    feedback_log_to_dict,
)
from revhub.domain.srs.ports import (
    BookmarkStore,
    PreferenceStore,
    ReviewHistoryStore,
    TestResultStore,
)

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS bookmarks (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    question_id TEXT NOT NULL,
    srs_repetitions INTEGER NOT NULL DEFAULT 0,
    srs_ease_factor REAL NOT NULL DEFAULT 2.5 CHECK(srs_ease_factor >= 1.3),
    srs_interval INTEGER NOT NULL DEFAULT 0,
    next_review_date TEXT,
    is_custom_reminder_active BOOLEAN NOT NULL DEFAULT 0,
    custom_next_review_date TEXT,
    created_at TEXT NOT NULL DEFAULT (date('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE(user_id, question_id)
);

CREATE TABLE IF NOT EXISTS test_results (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    srs_feedback_log JSON
);

CREATE TABLE IF NOT EXISTS user_preferences (
    user_id TEXT PRIMARY KEY,
    srs_pacing_mode REAL NOT NULL DEFAULT 0 CHECK(srs_pacing_mode BETWEEN -1 AND 1)
);

CREATE TABLE IF NOT EXISTS review_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    bookmark_id TEXT NOT NULL,
    question_id TEXT NOT NULL,
    performance_rating INTEGER NOT NULL CHECK(performance_rating BETWEEN 1 AND 4),
    interval_at_review INTEGER NOT NULL,
    reviewed_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_review_history_user ON review_history(user_id, reviewed_at);
"""


def init_db(db_path: Path | str) -> sqlite3.Connection:
    db_path = Path(db_path)
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), timeout=5, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    if str(db_path) != ":memory:":
        conn.execute("PRAGMA journal_mode=WAL")
    conn.executescript(SCHEMA)
    conn.commit()
    return conn


@contextmanager
def _writing(conn: sqlite3.Connection, what: str):
    """Commit on success; roll back on any failure, wrapping database errors in PersistenceError."""
    try:
        yield
        conn.commit()
    except RevhubError:
        conn.rollback()
        raise
    except sqlite3.IntegrityError as e:
        conn.rollback()
        raise PersistenceError(f"Failed to write {what}: {e}") from e
    except sqlite3.Error as e:
        conn.rollback()
        logger.error(f"Failed to write {what}: {e}")
        raise PersistenceError(f"Failed to write {what}: {e}") from e


def _date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value else None


def _row_to_bookmark(row: sqlite3.Row) -> Bookmark:
    return Bookmark(
        id=row["id"],
        user_id=row["user_id"],
        question_id=row["question_id"],
        state=SchedulingState(
            repetitions=row["srs_repetitions"],
            ease_factor=row["srs_ease_factor"],
            interval=row["srs_interval"],
            next_review_date=_date(row["next_review_date"]),
        ),
        reminder=CustomReminder(
            active=bool(row["is_custom_reminder_active"]),
            date=_date(row["custom_next_review_date"]),
        ),
        created_at=_date(row["created_at"]),
    )


def _require_rows(cur: sqlite3.Cursor, expected: int, what: str) -> None:
    if cur.rowcount < expected:
        raise NotFoundError(f"{what} not found")


class SqliteBookmarkStore(BookmarkStore):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    async def get_bookmark(self, user_id: str, question_id: str) -> Bookmark | None:
        row = self.conn.execute(
            "SELECT * FROM bookmarks WHERE user_id = ? AND question_id = ?",
            (user_id, question_id),
        ).fetchone()
        return _row_to_bookmark(row) if row else None

    async def get_bookmark_by_id(self, user_id: str, bookmark_id: str) -> Bookmark | None:
        row = self.conn.execute(
            "SELECT * FROM bookmarks WHERE id = ? AND user_id = ?", (bookmark_id, user_id)
        ).fetchone()
        return _row_to_bookmark(row) if row else None

    async def list_bookmarks(self, user_id: str) -> list[Bookmark]:
        rows = self.conn.execute(
            "SELECT * FROM bookmarks WHERE user_id = ? ORDER BY created_at, id", (user_id,)
        ).fetchall()
        return [_row_to_bookmark(r) for r in rows]

    async def add_bookmark(self, bookmark: Bookmark) -> None:
        state, reminder = bookmark.state, bookmark.reminder
        try:
            with _writing(self.conn, f"bookmark {bookmark.id}"):
                self.conn.execute(
                    """
                    INSERT INTO bookmarks (id, user_id, question_id, srs_repetitions,
                        srs_ease_factor, srs_interval, next_review_date,
                        is_custom_reminder_active, custom_next_review_date, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, COALESCE(?, date('now')))
                    """,
                    (
                        bookmark.id,
                        bookmark.user_id,
                        bookmark.question_id,
                        state.repetitions,
                        state.ease_factor,
                        state.interval,
                        _iso(state.next_review_date),
                        reminder.active,
                        _iso(reminder.date),
                        _iso(bookmark.created_at),
                    ),
                )
        except PersistenceError as e:
            if isinstance(e.__cause__, sqlite3.IntegrityError):
                raise ValidationError(
                    f"Question {bookmark.question_id} is already bookmarked"
                ) from e
            raise

    async def delete_bookmark(self, user_id: str, bookmark_id: str) -> bool:
        with _writing(self.conn, f"bookmark {bookmark_id}"):
            cur = self.conn.execute(
                "DELETE FROM bookmarks WHERE id = ? AND user_id = ?", (bookmark_id, user_id)
            )
        return cur.rowcount > 0

    async def update_state(self, bookmark_id: str, state: SchedulingState) -> None:
        with _writing(self.conn, f"bookmark {bookmark_id}"):
            cur = self.conn.execute(
                """
                UPDATE bookmarks SET srs_repetitions = ?, srs_ease_factor = ?,
                    srs_interval = ?, next_review_date = ?, updated_at = datetime('now')
                WHERE id = ?
                """,
                (
                    state.repetitions,
                    state.ease_factor,
                    state.interval,
                    _iso(state.next_review_date),
                    bookmark_id,
                ),
            )
            _require_rows(cur, 1, f"Bookmark {bookmark_id}")

    async def update_reminder(self, bookmark_id: str, reminder: CustomReminder) -> None:
        with _writing(self.conn, f"bookmark {bookmark_id}"):
            cur = self.conn.execute(
                """
                UPDATE bookmarks SET is_custom_reminder_active = ?,
                    custom_next_review_date = ?, updated_at = datetime('now')
                WHERE id = ?
                """,
                (reminder.active, _iso(reminder.date), bookmark_id),
            )
            _require_rows(cur, 1, f"Bookmark {bookmark_id}")

    async def bulk_update(self, bookmarks: list[Bookmark]) -> None:
        with _writing(self.conn, f"batch of {len(bookmarks)} bookmarks"):
            cur = self.conn.executemany(
                """
                UPDATE bookmarks SET srs_repetitions = ?, srs_ease_factor = ?,
                    srs_interval = ?, next_review_date = ?,
                    is_custom_reminder_active = ?, custom_next_review_date = ?,
                    updated_at = datetime('now')
                WHERE id = ?
                """,
                [
                    (
                        b.state.repetitions,
                        b.state.ease_factor,
                        b.state.interval,
                        _iso(b.state.next_review_date),
                        b.reminder.active,
                        _iso(b.reminder.date),
                        b.id,
                    )
                    for b in bookmarks
                ],
            )
            _require_rows(cur, len(bookmarks), "Bookmark in batch")


class SqliteTestResultStore(TestResultStore):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def add_result(self, result_id: str, user_id: str) -> None:
        with _writing(self.conn, f"test result {result_id}"):
            self.conn.execute(
                "INSERT INTO test_results (id, user_id, srs_feedback_log) VALUES (?, ?, NULL)",
                (result_id, user_id),
            )

    async def get_feedback_log(self, result_id: str, user_id: str) -> FeedbackLog | None:
        row = self.conn.execute(
            "SELECT srs_feedback_log FROM test_results WHERE id = ? AND user_id = ?",
            (result_id, user_id),
        ).fetchone()
        if row is None:
            return None
        raw = row["srs_feedback_log"]
        return feedback_log_from_dict(json.loads(raw) if raw else None)

    async def save_feedback_log(self, result_id: str, user_id: str, log: FeedbackLog) -> None:
        with _writing(self.conn, f"feedback log of {result_id}"):
            self.conn.execute(
                "UPDATE test_results SET srs_feedback_log = ? WHERE id = ? AND user_id = ?",
                (json.dumps(feedback_log_to_dict(log)), result_id, user_id),
            )


class SqlitePreferenceStore(PreferenceStore):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    async def get_pacing(self, user_id: str) -> float | None:
        row = self.conn.execute(
            "SELECT srs_pacing_mode FROM user_preferences WHERE user_id = ?", (user_id,)
        ).fetchone()
        return row["srs_pacing_mode"] if row else None

    async def set_pacing(self, user_id: str, pacing: float) -> None:
        with _writing(self.conn, f"preferences of {user_id}"):
            self.conn.execute(
                """
                INSERT INTO user_preferences (user_id, srs_pacing_mode) VALUES (?, ?)
                ON CONFLICT(user_id) DO UPDATE SET srs_pacing_mode = excluded.srs_pacing_mode
                """,
                (user_id, pacing),
            )


class SqliteReviewHistoryStore(ReviewHistoryStore):
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    async def add_review(self, entry: ReviewHistoryEntry) -> None:
        with _writing(self.conn, f"review of {entry.bookmark_id}"):
            self.conn.execute(
                """
                INSERT INTO review_history (user_id, bookmark_id, question_id,
                    performance_rating, interval_at_review, reviewed_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.user_id,
                    entry.bookmark_id,
                    entry.question_id,
                    entry.rating,
                    entry.interval_at_review,
                    entry.reviewed_at.isoformat(),
                ),
            )

    async def list_reviews(
        self, user_id: str, since: datetime | None = None
    ) -> list[ReviewHistoryEntry]:
        query = "SELECT * FROM review_history WHERE user_id = ?"
        params: list = [user_id]
        if since is not None:
            query += " AND reviewed_at >= ?"
            params.append(since.isoformat())
        rows = self.conn.execute(query + " ORDER BY reviewed_at ASC", params).fetchall()
        return [
            ReviewHistoryEntry(
                user_id=r["user_id"],
                bookmark_id=r["bookmark_id"],
                question_id=r["question_id"],
                rating=r["performance_rating"],
                interval_at_review=r["interval_at_review"],
                reviewed_at=datetime.fromisoformat(r["reviewed_at"]),
            )
            for r in rows
        ]
