"""Tests for the schedule record and rating enum."""
import dataclasses

import pytest

from review_scheduler.errors import InvalidDifficulty
from review_scheduler.models import NEVER, Difficulty, ScheduledItem


def test_scheduled_item_defaults():
    item = ScheduledItem(item_id="card-1", next_review_at=1000)
    assert item.review_count == 1
    assert item.last_attempt_successful is False
    assert item.interval_multiplier == 1.0
    assert item.difficulty is Difficulty.AGAIN
    assert item.is_graduated is False


def test_scheduled_item_is_immutable():
    item = ScheduledItem(item_id="card-1", next_review_at=1000)
    with pytest.raises(dataclasses.FrozenInstanceError):
        item.review_count = 5


def test_never_is_after_any_timestamp():
    assert NEVER > 10 ** 18
    item = ScheduledItem(item_id="card-1", next_review_at=NEVER)
    assert item.is_graduated
    assert not item.is_due(10 ** 18)


def test_is_due_boundary():
    item = ScheduledItem(item_id="card-1", next_review_at=500)
    assert not item.is_due(499)
    assert item.is_due(500)


def test_difficulty_parse_accepts_names_and_members():
    assert Difficulty.parse("easy") is Difficulty.EASY
    assert Difficulty.parse(" Hard ") is Difficulty.HARD
    assert Difficulty.parse(Difficulty.GOOD) is Difficulty.GOOD


@pytest.mark.parametrize("value", ["medium", "", None, 3])
def test_difficulty_parse_rejects_unknown(value):
    with pytest.raises(InvalidDifficulty):
        Difficulty.parse(value)


def test_invalid_difficulty_is_value_error():
    with pytest.raises(ValueError, match="medium"):
        Difficulty.parse("medium")


def test_to_dict_encodes_never_as_none():
    item = ScheduledItem(
        item_id="card-1", next_review_at=NEVER, review_count=4,
        last_attempt_successful=True, interval_multiplier=2.25,
        difficulty=Difficulty.GOOD,
    )
    data = item.to_dict()
    assert data["next_review_at"] is None
    assert data["difficulty"] == "good"
    assert ScheduledItem.from_dict(data) == item
