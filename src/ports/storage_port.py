"""Storage ports — local persistence and optional remote sync.

Records crossing these ports are the JSON-serializable camelCase dicts
produced by Schedule.to_dict().
"""

from __future__ import annotations

from typing import Protocol


class SyncError(Exception):
    """Raised when the remote copy of the schedules cannot be replaced."""


class ScheduleRepository(Protocol):
    """Local persisted store of schedule records."""

    def load(self) -> list[dict]: ...

    def save(self, records: list[dict]) -> None: ...


class ScheduleSync(Protocol):
    """Remote process holding a mirror of the schedule list."""

    async def replace(self, records: list[dict]) -> list[dict]: ...
