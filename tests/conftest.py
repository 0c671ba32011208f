import pytest

from review_scheduler.clock import FixedClock
from review_scheduler.scheduler import Scheduler


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_schedule.db")
    return db_path


@pytest.fixture
def clock():
    return FixedClock(0)


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock=clock)
