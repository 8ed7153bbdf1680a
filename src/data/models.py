"""
Schedule Reminders — Data Models.

A schedule is the sole entity: a one-off or weekly-recurring reminder whose
lead/start notification flags are scoped to a single occurrence.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RepeatRule:
    """Weekly recurrence. Days are 0 (Sunday) .. 6 (Saturday), sorted, unique."""

    days: tuple[int, ...]
    kind: str = "weekly"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.kind, "days": list(self.days)}


@dataclass
class Schedule:
    """A reminder tracked by the notification poller.

    `notified` is derived from the two persisted flags and is never stored.
    """

    id: int
    title: str
    time: str                               # HH:MM local wall clock
    date: str = ""                          # YYYY-MM-DD, one-off only
    description: str = ""
    repeat: RepeatRule | None = None
    pre_notified: bool = False
    start_notified: bool = False
    last_occurrence_key: str | None = None  # YYYY-MM-DD the flags refer to
    tts_message: str | None = None
    tts_lead_message: str | None = None
    created_at: int = 0                     # epoch milliseconds
    updated_at: int = 0

    @property
    def notified(self) -> bool:
        return self.pre_notified or self.start_notified

    @property
    def is_recurring(self) -> bool:
        return self.repeat is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase record shape."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "time": self.time,
            "repeat": self.repeat.to_dict() if self.repeat else None,
            "preNotified": self.pre_notified,
            "startNotified": self.start_notified,
            "lastOccurrenceKey": self.last_occurrence_key,
            "ttsMessage": self.tts_message,
            "ttsLeadMessage": self.tts_lead_message,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
