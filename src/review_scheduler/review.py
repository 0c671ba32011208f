"""Review recording: the read-modify-write cycle around the scheduler."""
from review_scheduler.db import get_connection, get_review_log, load_item, save_review
from review_scheduler.logging_config import get_logger
from review_scheduler.models import Difficulty, ScheduledItem
from review_scheduler.scheduler import Scheduler

logger = get_logger(__name__)


def record_review(
    db_path: str,
    scheduler: Scheduler,
    item_id: str,
    difficulty,
    was_successful: bool = False,
) -> ScheduledItem:
    """Schedule or reschedule ``item_id`` and persist the result.

    New items go through ``schedule_review`` (``was_successful`` is ignored
    for them); known items through ``update_schedule``. The clock is read
    once, and the same instant is logged as the review time. The save and
    the log entry share a transaction that is conditional on the review
    count read here, so a concurrent writer makes this raise StaleRecord
    instead of silently overwriting.
    """
    difficulty = Difficulty.parse(difficulty)
    prior = load_item(db_path, item_id)
    now = scheduler.clock.now()
    if prior is None:
        item = scheduler.schedule_review(item_id, difficulty, now=now)
        expected = 0
        was_successful = False
    else:
        item = scheduler.update_schedule(prior, was_successful, difficulty, now=now)
        expected = prior.review_count
    save_review(
        db_path, item, expected, difficulty, was_successful, reviewed_at=now,
    )
    logger.info(
        "review_recorded", item_id=item_id, difficulty=difficulty.value,
        was_successful=was_successful, review_count=item.review_count,
        graduated=item.is_graduated,
    )
    return item


def replay_reviews(db_path: str, scheduler: Scheduler, item_id: str) -> list:
    """Rebuild an item's record chain from its review log.

    Each logged review is re-run through ``scheduler`` at its logged review
    time; the scheduler's own clock is not read or changed.
    """
    records = []
    for row in get_review_log(db_path, item_id):
        if not records:
            records.append(scheduler.schedule_review(
                item_id, row["difficulty"], now=row["reviewed_at"],
            ))
        else:
            records.append(scheduler.update_schedule(
                records[-1], bool(row["was_successful"]), row["difficulty"],
                now=row["reviewed_at"],
            ))
    return records


def get_review_stats(db_path: str, now: float) -> dict:
    """Counts of scheduled, due and graduated items plus logged reviews."""
    conn = get_connection(db_path)
    total = conn.execute("SELECT COUNT(*) FROM scheduled_items").fetchone()[0]
    due = conn.execute(
        """SELECT COUNT(*) FROM scheduled_items
        WHERE next_review_at IS NOT NULL AND next_review_at <= ?""",
        (now,),
    ).fetchone()[0]
    graduated = conn.execute(
        "SELECT COUNT(*) FROM scheduled_items WHERE next_review_at IS NULL"
    ).fetchone()[0]
    reviews = conn.execute("SELECT COUNT(*) FROM review_log").fetchone()[0]
    conn.close()
    return {
        "total_items": total,
        "due": due,
        "graduated": graduated,
        "reviews_logged": reviews,
    }
