"""
Schedule Reminders — Schedule Database.

Schedules persist in SQLite across restarts, serialized as one JSON array
under a single store key. The array is written whole on every save; the
in-memory list held by the schedule store stays authoritative.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEDULES_KEY = "schedules"


class ScheduleDB:
    """SQLite-backed implementation of ScheduleRepository."""

    def __init__(self, db_path: str | None = None, key: str = SCHEDULES_KEY) -> None:
        if db_path is None:
            from src.config import settings
            db_path = settings.DATABASE_PATH

        self._db_path = db_path
        self._key = key
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        """Create the key/value table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS kv_store (
                    key        TEXT    PRIMARY KEY,
                    value      TEXT    NOT NULL,
                    updated_at INTEGER NOT NULL
                )
            """)
        logger.debug("kv_store table initialized at %s", self._db_path)

    def load(self) -> list[dict]:
        """Return the stored records, or [] when nothing usable is stored."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM kv_store WHERE key = ?", (self._key,)
            ).fetchone()
        if row is None:
            return []

        try:
            data = json.loads(row["value"])
        except json.JSONDecodeError as exc:
            logger.warning("Stored %r is not valid JSON, ignoring: %s", self._key, exc)
            return []

        if not isinstance(data, list):
            logger.warning("Stored %r is not a list (%s), ignoring", self._key, type(data).__name__)
            return []
        return data

    def save(self, records: list[dict]) -> None:
        """Replace the stored array with `records`."""
        payload = json.dumps(records, ensure_ascii=False)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (self._key, payload, int(time.time() * 1000)),
            )
        logger.debug("Saved %d schedule record(s)", len(records))
