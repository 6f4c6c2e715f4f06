import sys
import logging
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Make the src/ packages importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


class FakeClock:
    """Controllable replacement for datetime.now"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Configure logging for tests."""
    logging.basicConfig(level=logging.INFO)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 14, 12, 0, 0))
