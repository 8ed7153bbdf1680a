"""Upcoming schedules — read-only projection for dashboards and announcers.

Uses the same occurrence calculator as the poller so every view agrees on
when a schedule happens next.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from src.core.messages import WEEKDAY_LABELS, display_title, format_repeat_label
from src.core.occurrence import get_next_occurrence, weekday_index
from src.data.models import Schedule

DEFAULT_RANGE_HOURS = 24
DEFAULT_LIMIT = 5


@dataclass
class UpcomingItem:
    """One row of the "upcoming" widget."""

    id: int
    title: str
    occurs_at: datetime
    day_label: str         # "today" or "10/19 (Mon)"
    time_label: str        # HH:MM
    repeat_label: str      # "" for one-off schedules
    minutes_left: int
    relative_label: str    # "in 15 min", "in 2 h 5 min", ...


def format_relative(minutes: int) -> str:
    if minutes <= 0:
        return "starting soon"
    if minutes < 60:
        return f"in {minutes} min"
    hours, mins = divmod(minutes, 60)
    if mins == 0:
        return f"in {hours} h"
    return f"in {hours} h {mins} min"


def _day_label(occurs_at: datetime, now: datetime) -> str:
    if occurs_at.date() == now.date():
        return "today"
    return f"{occurs_at:%m/%d} ({WEEKDAY_LABELS[weekday_index(occurs_at)]})"


def upcoming_schedules(
    schedules: Iterable[Schedule],
    now: datetime,
    range_hours: int = DEFAULT_RANGE_HOURS,
    limit: int = DEFAULT_LIMIT,
) -> list[UpcomingItem]:
    """Return the next occurrences within `range_hours` of `now`, soonest first.

    Past one-off occurrences are excluded.
    """
    horizon = timedelta(hours=range_hours)
    found: list[tuple[Schedule, datetime]] = []

    for schedule in schedules:
        occurrence = get_next_occurrence(schedule, now)
        if occurrence is None:
            continue
        diff = occurrence.occurs_at - now
        if diff < timedelta(0) or diff > horizon:
            continue
        found.append((schedule, occurrence.occurs_at))

    found.sort(key=lambda pair: pair[1])

    items: list[UpcomingItem] = []
    for schedule, occurs_at in found[:limit]:
        minutes_left = round((occurs_at - now).total_seconds() / 60)
        items.append(UpcomingItem(
            id=schedule.id,
            title=display_title(schedule),
            occurs_at=occurs_at,
            day_label=_day_label(occurs_at, now),
            time_label=f"{occurs_at:%H:%M}",
            repeat_label=format_repeat_label(schedule.repeat),
            minutes_left=minutes_left,
            relative_label=format_relative(minutes_left),
        ))
    return items
