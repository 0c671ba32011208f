"""Exceptions raised by the scheduler and its schedule store."""


class SchedulerError(Exception):
    """Base class for review scheduler errors."""


class InvalidDifficulty(SchedulerError, ValueError):
    """A rating outside again/hard/good/easy was supplied."""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid difficulty {value!r}; expected one of again, hard, good, easy"
        )


class StaleRecord(SchedulerError):
    """The stored record changed since the caller read it."""

    def __init__(self, item_id: str, expected, actual):
        self.item_id = item_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Stale record for {item_id!r}: expected review_count={expected}, "
            f"store has {actual}"
        )
