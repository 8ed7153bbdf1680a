"""Shared test fixtures and configuration.

Sets fake environment variables before any src imports so src.config loads
log-only adapters, and provides a synthetic clock plus temp-DB fixtures.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("NOTIFIER", "log")
os.environ.setdefault("SPEECH_ENGINE", "log")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")
os.environ.setdefault("SYNC_URL", "")
os.environ.setdefault("LEAD_MINUTES", "5")
os.environ.setdefault("COOLDOWN_SECONDS", "60")

from datetime import datetime

import pytest


class FakeClock:
    """Callable clock whose time tests move by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19)


@pytest.fixture
def clock():
    """A FakeClock starting Monday 2026-10-19 08:00."""
    return FakeClock(MONDAY.replace(hour=8))


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_schedules.db")


@pytest.fixture
def schedule_db(tmp_db_path):
    """Return a ScheduleDB instance backed by a temp file."""
    from src.data.db import ScheduleDB
    return ScheduleDB(db_path=tmp_db_path)


@pytest.fixture
def store(schedule_db, clock):
    """Return an empty ScheduleStore on a temp DB and the fake clock."""
    from src.core.schedule_store import ScheduleStore
    return ScheduleStore(schedule_db, clock=clock)
