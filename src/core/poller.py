"""
Schedule Reminders — Notification Poller.

Decides, once per minute, which schedules get a lead or start reminder.

`evaluate` is the pure part: given the schedule list and "now" it re-arms
recurring schedules, applies the firing rules, mutates the flags and returns
what changed and what must be dispatched. `NotificationPoller` is the thin
driver around it: it owns the self-rescheduling timer, hands dispatch
requests to the ReminderDispatcher and commits the pass to the store.

Firing rules (cooldown = grace window after the start time; a missed
window short-circuits the other two):

    time_diff < -cooldown and a flag is open  -> close both, no dispatch
    on the minute and minutes_left == lead    -> lead reminder (lead > 0 only)
    on the minute and minutes_left == 0,
        or -cooldown < time_diff <= 0         -> start reminder
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Callable, Iterable

from src.core.notification_state import mark_handled, mark_lead, mark_start, rearm
from src.core.occurrence import Occurrence, get_next_occurrence
from src.data.models import Schedule

if TYPE_CHECKING:
    from src.core.dispatcher import ReminderDispatcher
    from src.core.schedule_store import ScheduleStore

logger = logging.getLogger(__name__)

LEAD = "lead"
START = "start"

_MINUTE = timedelta(minutes=1)


@dataclass
class DispatchRequest:
    """A reminder the pass decided to deliver."""

    kind: str                  # LEAD | START
    schedule: Schedule
    occurrence: Occurrence


@dataclass
class TickResult:
    """Outcome of one evaluation pass."""

    dirty: list[Schedule] = field(default_factory=list)
    dispatches: list[DispatchRequest] = field(default_factory=list)

    def mark_dirty(self, schedule: Schedule) -> None:
        if not any(s is schedule for s in self.dirty):
            self.dirty.append(schedule)


def evaluate(
    schedules: Iterable[Schedule],
    now: datetime,
    lead_minutes: int,
    cooldown: timedelta,
) -> TickResult:
    """Run the firing rules over `schedules` at `now`.

    Flags are updated in place before the dispatch requests are returned, so
    a failed delivery is never retried.
    """
    result = TickResult()
    on_boundary = now.second == 0
    aligned = now.replace(second=0, microsecond=0)

    for schedule in list(schedules):
        occurrence = get_next_occurrence(schedule, now)
        if occurrence is None:
            continue

        if rearm(schedule, occurrence.key):
            result.mark_dirty(schedule)
        elif schedule.repeat is None and not schedule.last_occurrence_key:
            schedule.last_occurrence_key = occurrence.key
            result.mark_dirty(schedule)

        time_diff = occurrence.occurs_at - now
        minutes_left = (occurrence.occurs_at - aligned) // _MINUTE

        if time_diff < -cooldown and not (schedule.pre_notified and schedule.start_notified):
            logger.info(
                "Schedule #%s missed its window (%s), marking handled",
                schedule.id, occurrence.occurs_at,
            )
            mark_handled(schedule)
            result.mark_dirty(schedule)
            continue

        lead_due = lead_minutes > 0 and on_boundary and minutes_left == lead_minutes
        if lead_due and not schedule.pre_notified:
            mark_lead(schedule)
            result.mark_dirty(schedule)
            result.dispatches.append(DispatchRequest(LEAD, schedule, occurrence))

        due = (on_boundary and minutes_left == 0) or (-cooldown < time_diff <= timedelta(0))
        if due and not schedule.start_notified:
            mark_start(schedule)
            result.mark_dirty(schedule)
            result.dispatches.append(DispatchRequest(START, schedule, occurrence))

    return result


def seconds_until_next_minute(now: datetime) -> float:
    return 60.0 - now.second - now.microsecond / 1_000_000


class NotificationPoller:
    """Minute-aligned, self-rescheduling driver for `evaluate`."""

    def __init__(
        self,
        store: ScheduleStore,
        dispatcher: ReminderDispatcher,
        clock: Callable[[], datetime] = datetime.now,
        lead_minutes: int = 5,
        cooldown: timedelta = timedelta(seconds=60),
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._clock = clock
        self._lead_minutes = lead_minutes
        self._cooldown = cooldown
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_pass(self, now: datetime | None = None) -> TickResult:
        """Evaluate every schedule once, deliver reminders, commit the pass."""
        if now is None:
            now = self._clock()
        result = evaluate(self._store.list(), now, self._lead_minutes, self._cooldown)

        for request in result.dispatches:
            if not self._store.contains(request.schedule):
                logger.info("Schedule #%s was removed mid-pass, skipping", request.schedule.id)
                continue
            try:
                if request.kind == LEAD:
                    await self._dispatcher.dispatch_lead(request.schedule, request.occurrence)
                else:
                    await self._dispatcher.dispatch_start(request.schedule, request.occurrence)
            except Exception as exc:
                logger.error(
                    "Dispatching %s reminder for schedule #%s failed: %s",
                    request.kind, request.schedule.id, exc,
                )

        self._store.commit(result.dirty)
        return result

    def start(self) -> None:
        """Run one pass now, then one per minute boundary until stopped."""
        if self.running:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(self._stop_event))
        logger.info(
            "Notification poller started (lead %d min, cooldown %ss)",
            self._lead_minutes, int(self._cooldown.total_seconds()),
        )

    async def stop(self) -> None:
        """Clear the pending wait; a pass already in flight is allowed to finish."""
        if self._task is None or self._stop_event is None:
            return
        self._stop_event.set()
        await self._task
        self._task = None
        logger.info("Notification poller stopped")

    async def _run(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            await self._safe_pass()
            delay = seconds_until_next_minute(self._clock())
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                continue

    async def _safe_pass(self) -> None:
        try:
            await self.run_pass()
        except Exception:
            logger.exception("Notification pass failed")
