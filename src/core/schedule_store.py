"""
Schedule Reminders — Schedule Store.

Holds the canonical in-memory list of schedules. Every record is
re-normalized when it crosses the store boundary, every mutation is
persisted through the ScheduleRepository port (and mirrored to the optional
ScheduleSync port), and every batch of mutations is announced once on the
change bus.

In-memory state is authoritative: persistence and sync failures are logged
and never roll back a mutation.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable

from src.core.events import ChangeBus
from src.core.notification_state import (
    initialize_occurrence_key,
    repair_legacy_flags,
)
from src.core.occurrence import get_next_occurrence
from src.data.models import Schedule
from src.data.normalize import normalize_entry

if TYPE_CHECKING:
    from src.ports.storage_port import ScheduleRepository, ScheduleSync

logger = logging.getLogger(__name__)

SCOPE_STORE = "store"
SCOPE_NOTIFICATIONS = "notifications"

# snake_case field names accepted by update(), mapped to record keys
_FIELD_ALIASES = {
    "pre_notified": "preNotified",
    "start_notified": "startNotified",
    "last_occurrence_key": "lastOccurrenceKey",
    "tts_message": "ttsMessage",
    "tts_lead_message": "ttsLeadMessage",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def _now_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


class ScheduleStore:
    """In-memory schedule list with normalized CRUD and batched persistence."""

    get_next_occurrence = staticmethod(get_next_occurrence)

    def __init__(
        self,
        repository: ScheduleRepository,
        sync: ScheduleSync | None = None,
        bus: ChangeBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repository = repository
        self._sync = sync
        self.bus = bus or ChangeBus()
        self._clock = clock
        self._schedules: list[Schedule] = []
        self._pending_syncs: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self) -> list[Schedule]:
        """Return the live schedule list (shared reference, not a copy)."""
        return self._schedules

    def get(self, schedule_id: int) -> Schedule | None:
        for schedule in self._schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def contains(self, schedule: Schedule) -> bool:
        """True while `schedule` (by identity) is still part of the list."""
        return any(s is schedule for s in self._schedules)

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> list[Schedule]:
        """Replace the in-memory list with the normalized persisted records.

        Never raises: an unreadable store yields an empty list.
        """
        try:
            raw_records = self._repository.load()
        except Exception as exc:
            logger.error("Failed to load schedules, starting empty: %s", exc)
            raw_records = []

        if not isinstance(raw_records, list):
            logger.warning("Persisted schedules are not a list, starting empty")
            raw_records = []

        now = self._clock()
        loaded: list[Schedule] = []
        seen_ids: set[int] = set()
        changed = False

        for index, record in enumerate(raw_records):
            schedule = normalize_entry(record, now, index)
            if schedule is None:
                logger.warning("Dropping malformed schedule record at index %d", index)
                changed = True
                continue

            if schedule.id in seen_ids:
                schedule.id = self._fresh_id(seen_ids, _now_ms(now) + index)
                changed = True
            seen_ids.add(schedule.id)

            if isinstance(record, dict) and record.get("notified") is True:
                occurrence = get_next_occurrence(schedule, now)
                changed |= repair_legacy_flags(
                    schedule, True, occurrence.occurs_at if occurrence else None, now,
                )
            changed |= initialize_occurrence_key(schedule, now)
            loaded.append(schedule)

        self._schedules = loaded
        logger.info("Loaded %d schedule(s)", len(loaded))
        if changed:
            self.save()
        return self._schedules

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, data: dict[str, Any]) -> Schedule:
        """Normalize and append a new schedule. Raises ValueError on non-mapping input."""
        now = self._clock()
        schedule = normalize_entry(data, now)
        if schedule is None:
            raise ValueError(f"Schedule input must be a mapping, got {type(data).__name__}")

        self._prepare_new(schedule, now, _now_ms(now))
        self._schedules.append(schedule)
        logger.info("Schedule added: #%d '%s' at %s", schedule.id, schedule.title, schedule.time)
        self.save()
        return schedule

    def bulk_add(self, items: Iterable[dict[str, Any]]) -> list[Schedule]:
        """Append several schedules with a single save. Non-mappings are skipped."""
        now = self._clock()
        base_id = _now_ms(now)
        additions: list[Schedule] = []

        for index, data in enumerate(items):
            if isinstance(data, dict) and "id" not in data:
                data = {"id": base_id + index, **data}
            schedule = normalize_entry(data, now, index)
            if schedule is None:
                logger.warning("Skipping malformed bulk schedule input at index %d", index)
                continue
            self._prepare_new(schedule, now, base_id + index)
            self._schedules.append(schedule)
            additions.append(schedule)

        if additions:
            logger.info("Bulk-added %d schedule(s)", len(additions))
            self.save()
        return additions

    def update(self, schedule_id: int, fields: dict[str, Any]) -> Schedule | None:
        """Apply `fields` to a schedule and reset its notification state.

        Returns the replacement Schedule, or None if the id is unknown.
        """
        index = self._index_of(schedule_id)
        if index is None:
            logger.warning("Schedule #%s not found for update", schedule_id)
            return None

        now = self._clock()
        current = self._schedules[index]
        merged = current.to_dict()
        merged.update({_FIELD_ALIASES.get(k, k): v for k, v in fields.items()})
        merged.update(
            id=schedule_id,
            preNotified=False,
            startNotified=False,
            lastOccurrenceKey=None,
            createdAt=current.created_at,
            updatedAt=_now_ms(now),
        )

        replacement = normalize_entry(merged, now)
        initialize_occurrence_key(replacement, now)
        self._schedules[index] = replacement
        logger.info("Schedule #%d updated, notification state reset", schedule_id)
        self.save()
        return replacement

    def remove(self, schedule_id: int) -> bool:
        """Hard-delete a schedule. Returns True if something was removed."""
        remaining = [s for s in self._schedules if s.id != schedule_id]
        if len(remaining) == len(self._schedules):
            return False
        self._schedules = remaining
        logger.info("Schedule #%s deleted", schedule_id)
        self.save()
        return True

    def commit(self, dirty: Iterable[Schedule]) -> None:
        """Persist a poller pass's mutations in one write and emit one event."""
        dirty = [s for s in dirty if self.contains(s)]
        if not dirty:
            return
        now_ms = _now_ms(self._clock())
        for schedule in dirty:
            schedule.updated_at = now_ms
        self.save(scope=SCOPE_NOTIFICATIONS)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, scope: str = SCOPE_STORE) -> None:
        """Write the whole list locally, mirror it remotely, announce the change."""
        records = [s.to_dict() for s in self._schedules]
        try:
            self._repository.save(records)
        except Exception as exc:
            logger.error("Failed to persist %d schedule(s): %s", len(records), exc)

        self._mirror(records)
        self.bus.emit(scope)

    def _mirror(self, records: list[dict]) -> None:
        if self._sync is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping remote schedule sync")
            return
        task = loop.create_task(self._replace_remote(records))
        self._pending_syncs.add(task)
        task.add_done_callback(self._pending_syncs.discard)

    async def _replace_remote(self, records: list[dict]) -> None:
        try:
            result = await self._sync.replace(records)
            logger.debug("Remote sync accepted %d schedule(s)", len(result))
        except Exception as exc:
            logger.warning("Remote schedule sync failed: %s", exc)

    async def drain(self) -> None:
        """Wait for in-flight remote syncs (used on shutdown)."""
        if self._pending_syncs:
            await asyncio.gather(*self._pending_syncs, return_exceptions=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _index_of(self, schedule_id: int) -> int | None:
        for index, schedule in enumerate(self._schedules):
            if schedule.id == schedule_id:
                return index
        return None

    def _prepare_new(self, schedule: Schedule, now: datetime, fallback_id: int) -> None:
        existing = {s.id for s in self._schedules}
        if schedule.id in existing:
            schedule.id = self._fresh_id(existing, fallback_id)
        now_ms = _now_ms(now)
        schedule.created_at = now_ms
        schedule.updated_at = now_ms
        initialize_occurrence_key(schedule, now)

    @staticmethod
    def _fresh_id(taken: set[int], candidate: int) -> int:
        while candidate in taken:
            candidate += 1
        return candidate
