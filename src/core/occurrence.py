"""Occurrence calculator — pure business logic.

Projects a schedule's rule (one-off date or weekly day set) onto a concrete
local wall-clock datetime relative to a reference moment, together with the
stable key the notification flags are scoped to.

No I/O: this module only transforms data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from src.data.models import Schedule

logger = logging.getLogger(__name__)

# Two full weeks: always enough to hit a day of a non-empty weekly rule.
_SCAN_DAYS = 14


@dataclass(frozen=True)
class Occurrence:
    """A concrete instance of a schedule."""

    occurs_at: datetime
    key: str               # YYYY-MM-DD
    is_recurring: bool


def parse_time(raw: str) -> tuple[int, int] | None:
    """Extract (hour, minute) from an HH:MM string, or None if malformed."""
    if not isinstance(raw, str) or ":" not in raw:
        return None
    hour_part, _, minute_part = raw.strip().partition(":")
    try:
        hour, minute = int(hour_part), int(minute_part[:2])
    except ValueError:
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


def occurrence_key(moment: datetime | date) -> str:
    """The calendar-date string identifying an occurrence."""
    if isinstance(moment, datetime):
        moment = moment.date()
    return moment.isoformat()


def weekday_index(moment: datetime | date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday (the stored day convention)."""
    return (moment.weekday() + 1) % 7


def get_next_occurrence(schedule: Schedule, reference: datetime) -> Occurrence | None:
    """Return the next occurrence of `schedule` as seen from `reference`.

    One-off schedules always resolve to their own date + time, even when that
    moment is already past; deciding what a stale occurrence means belongs to
    the poller. Weekly schedules resolve to the first matching day whose time
    is not earlier than `reference` truncated to the minute.

    Returns None only for malformed input (bad time, bad date, empty rule).
    """
    hm = parse_time(schedule.time)
    if hm is None:
        return None
    hour, minute = hm

    if schedule.repeat is None:
        try:
            day = date.fromisoformat(schedule.date)
        except (TypeError, ValueError):
            return None
        occurs_at = datetime(day.year, day.month, day.day, hour, minute)
        return Occurrence(occurs_at=occurs_at, key=occurrence_key(day), is_recurring=False)

    days = set(schedule.repeat.days)
    if not days:
        return None

    start = reference.replace(second=0, microsecond=0)
    for offset in range(_SCAN_DAYS):
        candidate_day = start.date() + timedelta(days=offset)
        if weekday_index(candidate_day) not in days:
            continue
        candidate = start.replace(
            year=candidate_day.year, month=candidate_day.month, day=candidate_day.day,
            hour=hour, minute=minute,
        )
        if candidate >= start:
            return Occurrence(
                occurs_at=candidate,
                key=occurrence_key(candidate),
                is_recurring=True,
            )

    logger.warning("No occurrence found for schedule #%s within %d days", schedule.id, _SCAN_DAYS)
    return None
