"""Data classes for the review schedule."""
import math
from dataclasses import dataclass, replace
from enum import Enum

from review_scheduler.errors import InvalidDifficulty

# Sorts after every real timestamp; used for graduated items.
NEVER = math.inf


class Difficulty(str, Enum):
    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value) -> "Difficulty":
        """Return the Difficulty for an enum member or a case-insensitive name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidDifficulty(value)


@dataclass(frozen=True)
class ScheduledItem:
    item_id: str
    next_review_at: float
    review_count: int = 1
    last_attempt_successful: bool = False
    interval_multiplier: float = 1.0
    difficulty: Difficulty = Difficulty.AGAIN

    @property
    def is_graduated(self) -> bool:
        return self.next_review_at == NEVER

    def is_due(self, now: float) -> bool:
        return self.next_review_at <= now

    def evolve(self, **changes) -> "ScheduledItem":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Plain dict form; NEVER is written as None."""
        return {
            "item_id": self.item_id,
            "next_review_at": None if self.is_graduated else self.next_review_at,
            "review_count": self.review_count,
            "last_attempt_successful": self.last_attempt_successful,
            "interval_multiplier": self.interval_multiplier,
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, data) -> "ScheduledItem":
        next_review_at = data["next_review_at"]
        return cls(
            item_id=data["item_id"],
            next_review_at=NEVER if next_review_at is None else float(next_review_at),
            review_count=int(data["review_count"]),
            last_attempt_successful=bool(data["last_attempt_successful"]),
            interval_multiplier=float(data["interval_multiplier"]),
            difficulty=Difficulty.parse(data["difficulty"]),
        )
