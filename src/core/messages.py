"""Reminder message templates.

Builds notification titles/bodies and the spoken text for lead and start
reminders. A schedule's cached tts_message / tts_lead_message always wins
over the generated text.
"""

from __future__ import annotations

from datetime import date, datetime

from src.core.occurrence import Occurrence, weekday_index
from src.data.models import RepeatRule, Schedule

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
DEFAULT_TITLE = "Schedule"


def display_title(schedule: Schedule) -> str:
    return schedule.title.strip() or DEFAULT_TITLE


def format_repeat_label(repeat: RepeatRule | None) -> str:
    """Render a weekly rule as e.g. "every Mon/Wed"."""
    if repeat is None or not repeat.days:
        return ""
    if len(repeat.days) == 7:
        return "every day"
    if repeat.days == (1, 2, 3, 4, 5):
        return "every weekday"
    return "every " + "/".join(WEEKDAY_LABELS[d] for d in sorted(repeat.days))


def format_date_with_weekday(day: date | datetime | str) -> str:
    """E.g. "Mon 2026-10-19". Strings that are not ISO dates pass through."""
    if isinstance(day, str):
        try:
            day = date.fromisoformat(day)
        except ValueError:
            return day
    if isinstance(day, datetime):
        day = day.date()
    return f"{WEEKDAY_LABELS[weekday_index(day)]} {day.isoformat()}"


def _when_phrase(occurrence: Occurrence, now: datetime) -> str:
    time_text = occurrence.occurs_at.strftime("%H:%M")
    if occurrence.occurs_at.date() == now.date():
        return f"today at {time_text}"
    return f"on {format_date_with_weekday(occurrence.occurs_at)} at {time_text}"


def _with_repeat(title: str, schedule: Schedule) -> str:
    label = format_repeat_label(schedule.repeat)
    return f"{title} ({label})" if label else title


# ---------------------------------------------------------------------------
# Spoken text
# ---------------------------------------------------------------------------


def build_lead_speech(
    schedule: Schedule, occurrence: Occurrence, now: datetime, lead_minutes: int,
) -> str:
    """Spoken text for the lead reminder."""
    if schedule.tts_lead_message and schedule.tts_lead_message.strip():
        return schedule.tts_lead_message.strip()

    subject = _with_repeat(display_title(schedule), schedule)
    return (
        f"{subject} starts {_when_phrase(occurrence, now)}. "
        f"{lead_minutes} minutes to go, please get ready."
    )


def build_start_speech(schedule: Schedule, occurrence: Occurrence, now: datetime) -> str:
    """Spoken text for the start reminder."""
    if schedule.tts_message and schedule.tts_message.strip():
        return schedule.tts_message.strip()

    title = display_title(schedule)
    subject = _with_repeat(title, schedule)
    if occurrence.occurs_at.date() == now.date():
        return f"It is {occurrence.occurs_at.strftime('%H:%M')}. Time to start {subject}."
    return f"{subject} is scheduled {_when_phrase(occurrence, now)}."


# ---------------------------------------------------------------------------
# Notification title / body
# ---------------------------------------------------------------------------


def notification_title(schedule: Schedule) -> str:
    return f"Schedule: {display_title(schedule)}"


def lead_body(occurrence: Occurrence, lead_minutes: int) -> str:
    return (
        f"Starts in {lead_minutes} minutes\n"
        f"{format_date_with_weekday(occurrence.key)} {occurrence.occurs_at.strftime('%H:%M')}"
    )


def start_body(schedule: Schedule) -> str:
    return f"Starting now\n{schedule.description}".rstrip()
