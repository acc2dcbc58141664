from datetime import datetime, timezone
import pytest

from veriage_core.storage import InMemoryStorage
from veriage_core.utils import to_ms



class FixedClock:
    """Manually advanced epoch-ms clock."""

    def __init__(self, now: int):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FixedClock(to_ms(datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)))


@pytest.fixture
def store():
    return InMemoryStorage()
