"""Four-bucket spaced repetition scheduler.

Every operation is a pure function of its arguments and the injected clock:
records go in, new records come out, nothing is mutated or stored here.
"""
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from review_scheduler.clock import Clock, SystemClock
from review_scheduler.logging_config import get_logger
from review_scheduler.models import NEVER, Difficulty, ScheduledItem

logger = get_logger(__name__)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

BASE_INTERVALS = MappingProxyType({
    Difficulty.AGAIN: 5 * MINUTE_MS,
    Difficulty.HARD: 15 * MINUTE_MS,
    Difficulty.GOOD: HOUR_MS,
    Difficulty.EASY: DAY_MS,
})

SUCCESS_BACKOFF = 1.5


def next_interval(
    difficulty,
    multiplier: float = 1.0,
    intervals: Mapping[Difficulty, float] = BASE_INTERVALS,
) -> float:
    """Interval in milliseconds for a rating scaled by the backoff multiplier."""
    return intervals[Difficulty.parse(difficulty)] * multiplier


def get_due_cards(now: float, records: Iterable[ScheduledItem]) -> list:
    """Records whose next review is at or before ``now``, in input order."""
    return [record for record in records if record.is_due(now)]


class Scheduler:
    """Turns review ratings into new schedule records.

    ``schedule_review`` and ``update_schedule`` read the injected clock
    unless an explicit ``now`` is passed, which lets a caller stamp a record
    and its log entry with the same instant.
    """

    def __init__(
        self,
        clock: Optional[Clock] = None,
        intervals: Optional[Mapping[Difficulty, float]] = None,
    ):
        self.clock = clock or SystemClock()
        if intervals is None:
            self.intervals = BASE_INTERVALS
        else:
            table = {Difficulty.parse(k): v for k, v in intervals.items()}
            missing = set(Difficulty) - set(table)
            if missing:
                raise ValueError(
                    "Interval table is missing "
                    + ", ".join(sorted(d.value for d in missing))
                )
            self.intervals = MappingProxyType(table)

    def schedule_review(
        self, item_id: str, difficulty, now: Optional[float] = None
    ) -> ScheduledItem:
        """First scheduling of an item.

        The attempt is never marked successful here, whatever the rating.
        """
        difficulty = Difficulty.parse(difficulty)
        if now is None:
            now = self.clock.now()
        return ScheduledItem(
            item_id=item_id,
            next_review_at=now + next_interval(difficulty, 1.0, self.intervals),
            review_count=1,
            last_attempt_successful=False,
            interval_multiplier=1.0,
            difficulty=difficulty,
        )

    def update_schedule(
        self,
        record: ScheduledItem,
        was_successful: bool,
        difficulty,
        now: Optional[float] = None,
    ) -> ScheduledItem:
        """Reschedule ``record`` after another review.

        A successful ``easy`` review graduates the item: it is never due
        again and keeps its multiplier and difficulty. Graduation is
        terminal; further reviews of a graduated record only count the
        review. Otherwise a success grows the multiplier by 1.5x and a
        failure resets it to 1.0.
        """
        difficulty = Difficulty.parse(difficulty)
        if record.is_graduated:
            return record.evolve(
                review_count=record.review_count + 1,
                last_attempt_successful=bool(was_successful),
            )

        if was_successful and difficulty is Difficulty.EASY:
            logger.debug("item_graduated", item_id=record.item_id,
                         review_count=record.review_count + 1)
            return record.evolve(
                next_review_at=NEVER,
                review_count=record.review_count + 1,
                last_attempt_successful=True,
            )

        if was_successful:
            multiplier = record.interval_multiplier * SUCCESS_BACKOFF
        else:
            multiplier = 1.0
            if record.interval_multiplier != 1.0:
                logger.debug("backoff_reset", item_id=record.item_id,
                             prior_multiplier=record.interval_multiplier)

        if now is None:
            now = self.clock.now()
        return record.evolve(
            next_review_at=now + next_interval(difficulty, multiplier, self.intervals),
            review_count=record.review_count + 1,
            last_attempt_successful=bool(was_successful),
            interval_multiplier=multiplier,
            difficulty=difficulty,
        )

    def get_due_cards(self, now: float, records: Iterable[ScheduledItem]) -> list:
        return get_due_cards(now, records)

    def due_now(self, records: Iterable[ScheduledItem]) -> list:
        """Due records as of the scheduler's clock."""
        return get_due_cards(self.clock.now(), records)
