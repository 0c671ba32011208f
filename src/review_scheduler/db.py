"""SQLite schedule store: the persisted side of the scheduler's records."""
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from review_scheduler.config import DEFAULT_DB_PATH
from review_scheduler.errors import StaleRecord
from review_scheduler.logging_config import get_logger
from review_scheduler.models import Difficulty, ScheduledItem

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS scheduled_items (
    item_id TEXT PRIMARY KEY,
    next_review_at REAL,
    review_count INTEGER NOT NULL,
    last_attempt_successful INTEGER NOT NULL DEFAULT 0,
    interval_multiplier REAL NOT NULL DEFAULT 1.0,
    difficulty TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_scheduled_items_next_review
    ON scheduled_items(next_review_at);

CREATE TABLE IF NOT EXISTS review_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id TEXT NOT NULL,
    difficulty TEXT NOT NULL,
    was_successful INTEGER NOT NULL,
    review_count INTEGER NOT NULL,
    interval_multiplier REAL NOT NULL,
    next_review_at REAL,
    reviewed_at REAL NOT NULL,
    logged_at TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def _row_to_item(row) -> ScheduledItem:
    return ScheduledItem.from_dict(row)


def _write_item(
    conn: sqlite3.Connection, item: ScheduledItem, expected_review_count: Optional[int]
) -> None:
    row = item.to_dict()
    params = (
        row["next_review_at"], row["review_count"],
        int(row["last_attempt_successful"]), row["interval_multiplier"],
        row["difficulty"],
    )
    if expected_review_count is None:
        conn.execute(
            """INSERT OR REPLACE INTO scheduled_items
            (item_id, next_review_at, review_count, last_attempt_successful,
             interval_multiplier, difficulty)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (item.item_id, *params),
        )
    elif expected_review_count == 0:
        try:
            conn.execute(
                """INSERT INTO scheduled_items
                (item_id, next_review_at, review_count, last_attempt_successful,
                 interval_multiplier, difficulty)
                VALUES (?, ?, ?, ?, ?, ?)""",
                (item.item_id, *params),
            )
        except sqlite3.IntegrityError:
            _raise_stale(conn, item.item_id, expected_review_count)
    else:
        cur = conn.execute(
            """UPDATE scheduled_items SET next_review_at=?, review_count=?,
            last_attempt_successful=?, interval_multiplier=?, difficulty=?
            WHERE item_id=? AND review_count=?""",
            (*params, item.item_id, expected_review_count),
        )
        if cur.rowcount != 1:
            _raise_stale(conn, item.item_id, expected_review_count)


def _raise_stale(conn: sqlite3.Connection, item_id: str, expected: int) -> None:
    current = conn.execute(
        "SELECT review_count FROM scheduled_items WHERE item_id = ?", (item_id,)
    ).fetchone()
    actual = current["review_count"] if current else None
    logger.warning("stale_record", item_id=item_id, expected=expected, actual=actual)
    raise StaleRecord(item_id, expected, actual)


def _insert_log(
    conn: sqlite3.Connection, item: ScheduledItem, difficulty, was_successful: bool,
    reviewed_at: float,
) -> None:
    conn.execute(
        """INSERT INTO review_log (item_id, difficulty, was_successful, review_count,
        interval_multiplier, next_review_at, reviewed_at, logged_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            item.item_id, Difficulty.parse(difficulty).value, int(bool(was_successful)),
            item.review_count, item.interval_multiplier,
            None if item.is_graduated else item.next_review_at,
            reviewed_at, datetime.now(timezone.utc).isoformat(),
        ),
    )


def save_item(
    db_path: str, item: ScheduledItem, expected_review_count: Optional[int] = None
) -> None:
    """Insert or replace ``item``.

    With ``expected_review_count`` the write only lands if the stored row
    still has that review count; 0 means the item must not exist yet.
    """
    conn = get_connection(db_path)
    try:
        with conn:
            _write_item(conn, item, expected_review_count)
    finally:
        conn.close()


def save_review(
    db_path: str,
    item: ScheduledItem,
    expected_review_count: Optional[int],
    difficulty,
    was_successful: bool,
    reviewed_at: float,
) -> None:
    """Save ``item`` and append its review log row in one transaction.

    Either both land or neither does.
    """
    conn = get_connection(db_path)
    try:
        with conn:
            _write_item(conn, item, expected_review_count)
            _insert_log(conn, item, difficulty, was_successful, reviewed_at)
    finally:
        conn.close()


def load_item(db_path: str, item_id: str) -> Optional[ScheduledItem]:
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT * FROM scheduled_items WHERE item_id = ?", (item_id,)
    ).fetchone()
    conn.close()
    return _row_to_item(row) if row else None


def load_items(db_path: str) -> list:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM scheduled_items ORDER BY item_id").fetchall()
    conn.close()
    return [_row_to_item(r) for r in rows]


def delete_item(db_path: str, item_id: str) -> bool:
    """Remove an item and its review history. Returns whether it existed."""
    conn = get_connection(db_path)
    with conn:
        cur = conn.execute("DELETE FROM scheduled_items WHERE item_id = ?", (item_id,))
        conn.execute("DELETE FROM review_log WHERE item_id = ?", (item_id,))
    conn.close()
    return cur.rowcount > 0


def get_due_items(db_path: str, now: float, limit: int = 15) -> list:
    """Due items, earliest first. Graduated items (NULL) never match."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT * FROM scheduled_items
        WHERE next_review_at IS NOT NULL AND next_review_at <= ?
        ORDER BY next_review_at ASC, item_id ASC
        LIMIT ?""",
        (now, limit),
    ).fetchall()
    conn.close()
    return [_row_to_item(r) for r in rows]


def log_review(
    db_path: str, item: ScheduledItem, difficulty, was_successful: bool, reviewed_at: float
) -> None:
    """Append the transition that produced ``item`` to the review log."""
    conn = get_connection(db_path)
    try:
        with conn:
            _insert_log(conn, item, difficulty, was_successful, reviewed_at)
    finally:
        conn.close()


def get_review_log(db_path: str, item_id: str) -> list:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT * FROM review_log WHERE item_id = ? ORDER BY id", (item_id,)
    ).fetchall()
    conn.close()
    return rows
