"""Tests for recording reviews against the store."""
import sqlite3
from unittest.mock import patch

import pytest

from review_scheduler.clock import FixedClock, SystemClock
from review_scheduler.db import get_review_log, init_db, load_item, save_item
from review_scheduler.errors import InvalidDifficulty, StaleRecord
from review_scheduler.models import NEVER
from review_scheduler.review import get_review_stats, record_review, replay_reviews
from review_scheduler.scheduler import DAY_MS, HOUR_MS, MINUTE_MS, Scheduler


def test_first_review_schedules_item(tmp_db, scheduler):
    init_db(tmp_db)
    item = record_review(tmp_db, scheduler, "card-7", "again")
    assert item.next_review_at == 5 * MINUTE_MS
    assert item.review_count == 1
    assert load_item(tmp_db, "card-7") == item


def test_first_review_ignores_success_flag(tmp_db, scheduler):
    init_db(tmp_db)
    item = record_review(tmp_db, scheduler, "card-1", "easy", was_successful=True)
    assert not item.is_graduated
    assert item.last_attempt_successful is False
    assert get_review_log(tmp_db, "card-1")[0]["was_successful"] == 0


def test_later_reviews_update_item(tmp_db, scheduler, clock):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "card-1", "good")
    clock.set(HOUR_MS)
    item = record_review(tmp_db, scheduler, "card-1", "good", was_successful=True)
    assert item.review_count == 2
    assert item.interval_multiplier == 1.5
    assert item.next_review_at == HOUR_MS + 90 * MINUTE_MS
    assert load_item(tmp_db, "card-1") == item


def test_graduation_persists(tmp_db, scheduler):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "card-1", "hard")
    item = record_review(tmp_db, scheduler, "card-1", "easy", was_successful=True)
    assert item.next_review_at == NEVER
    assert load_item(tmp_db, "card-1").is_graduated


def test_concurrent_writer_conflict(tmp_db, scheduler):
    init_db(tmp_db)
    first = record_review(tmp_db, scheduler, "card-1", "good")
    # Another writer lands an update after our read.
    save_item(tmp_db, first.evolve(review_count=2))
    with patch("review_scheduler.review.load_item", return_value=first):
        with pytest.raises(StaleRecord):
            record_review(tmp_db, scheduler, "card-1", "good", was_successful=True)
    assert load_item(tmp_db, "card-1").review_count == 2
    assert len(get_review_log(tmp_db, "card-1")) == 1


def test_invalid_difficulty_writes_nothing(tmp_db, scheduler):
    init_db(tmp_db)
    with pytest.raises(InvalidDifficulty):
        record_review(tmp_db, scheduler, "card-1", "meh")
    assert load_item(tmp_db, "card-1") is None


def test_replay_matches_stored_chain(tmp_db, clock):
    init_db(tmp_db)
    scheduler = Scheduler(clock=clock)
    history = [("good", False), ("good", True), ("hard", False), ("easy", True)]
    for n, (rating, ok) in enumerate(history):
        clock.set(n * HOUR_MS)
        last = record_review(tmp_db, scheduler, "card-1", rating, was_successful=ok)
    replayed = replay_reviews(tmp_db, Scheduler(clock=FixedClock()), "card-1")
    assert len(replayed) == 4
    assert replayed[-1] == last


def test_review_stats(tmp_db, scheduler, clock):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "a", "again")
    record_review(tmp_db, scheduler, "b", "easy")
    record_review(tmp_db, scheduler, "c", "good")
    record_review(tmp_db, scheduler, "c", "easy", was_successful=True)
    stats = get_review_stats(tmp_db, now=10 * MINUTE_MS)
    assert stats == {"total_items": 3, "due": 1, "graduated": 1, "reviews_logged": 4}


class TickingClock:
    """Moves forward by one millisecond every time it is read."""

    def __init__(self, start=0):
        self.current = start

    def now(self):
        self.current += 1
        return self.current


def test_replay_matches_with_moving_clock(tmp_db):
    init_db(tmp_db)
    clock = TickingClock()
    scheduler = Scheduler(clock=clock)
    for rating, ok in [("good", False), ("good", True), ("good", True), ("hard", False)]:
        clock.current += HOUR_MS
        last = record_review(tmp_db, scheduler, "card-1", rating, was_successful=ok)
    rows = get_review_log(tmp_db, "card-1")
    assert rows[-1]["next_review_at"] == last.next_review_at
    assert last.next_review_at == rows[-1]["reviewed_at"] + 15 * MINUTE_MS
    replayed = replay_reviews(tmp_db, Scheduler(clock=FixedClock()), "card-1")
    assert replayed[-1] == last


def test_replay_leaves_scheduler_clock_alone(tmp_db, scheduler, clock):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "card-1", "again")
    clock.set(HOUR_MS)
    last = record_review(tmp_db, scheduler, "card-1", "good", was_successful=True)
    clock.set(7)
    assert replay_reviews(tmp_db, scheduler, "card-1")[-1] == last
    assert clock.now() == 7


def test_replay_with_system_clock(tmp_db, scheduler):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "card-1", "again")
    last = record_review(tmp_db, scheduler, "card-1", "hard", was_successful=False)
    assert replay_reviews(tmp_db, Scheduler(clock=SystemClock()), "card-1")[-1] == last


def test_failed_log_write_rolls_back_item(tmp_db, scheduler, clock):
    init_db(tmp_db)
    first = record_review(tmp_db, scheduler, "card-1", "good")
    clock.set(HOUR_MS)
    with patch("review_scheduler.db._insert_log",
               side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(sqlite3.OperationalError):
            record_review(tmp_db, scheduler, "card-1", "good", was_successful=True)
    assert load_item(tmp_db, "card-1") == first
    assert len(get_review_log(tmp_db, "card-1")) == 1


def test_failed_log_write_leaves_no_new_item(tmp_db, scheduler):
    init_db(tmp_db)
    with patch("review_scheduler.db._insert_log",
               side_effect=sqlite3.OperationalError("disk I/O error")):
        with pytest.raises(sqlite3.OperationalError):
            record_review(tmp_db, scheduler, "card-1", "again")
    assert load_item(tmp_db, "card-1") is None


def test_reviewing_graduated_item_keeps_it_graduated(tmp_db, scheduler, clock):
    init_db(tmp_db)
    record_review(tmp_db, scheduler, "card-1", "good")
    record_review(tmp_db, scheduler, "card-1", "easy", was_successful=True)
    clock.set(DAY_MS)
    item = record_review(tmp_db, scheduler, "card-1", "again", was_successful=False)
    assert item.is_graduated
    assert item.review_count == 3
    assert load_item(tmp_db, "card-1").is_graduated
    assert replay_reviews(tmp_db, scheduler, "card-1")[-1] == item
