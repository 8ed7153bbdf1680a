"""
Schedule Reminders — Record normalization.

Every record crossing a store boundary (load, add, update) is rebuilt here
so corrupted or legacy data never reaches the poller in an unexpected shape.
Nothing in this module raises on bad input.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from src.data.models import RepeatRule, Schedule

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_ALT_DATE_FORMATS = ("%Y/%m/%d", "%Y.%m.%d", "%Y%m%d")

DEFAULT_TIME = "00:00"

_REPEAT_TYPE_ALIASES = {
    "weekly": "weekly",
    "week": "weekly",
    "weekdays": "weekdays",
    "weekday": "weekdays",
    "daily": "daily",
    "everyday": "daily",
}

_PRESET_DAYS = {
    "weekdays": (1, 2, 3, 4, 5),
    "daily": (0, 1, 2, 3, 4, 5, 6),
}


def normalize_repeat(raw: Any) -> RepeatRule | None:
    """Collapse any repeat shape into a weekly rule, or None.

    Presets (daily, weekdays) only apply when no explicit days were given.
    An empty day set is never returned.
    """
    if isinstance(raw, RepeatRule):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return None

    type_key = raw.get("type", raw.get("kind", ""))
    type_key = type_key.strip().lower() if isinstance(type_key, str) else ""
    mapped = _REPEAT_TYPE_ALIASES.get(type_key, "weekly")

    candidates = raw.get("days")
    if not isinstance(candidates, (list, tuple, set)):
        candidates = []
    if not candidates:
        candidates = _PRESET_DAYS.get(mapped, ())

    days: set[int] = set()
    for value in candidates:
        if isinstance(value, bool):
            continue
        try:
            day = int(value)
        except (TypeError, ValueError):
            continue
        if day != value and not isinstance(value, str):
            continue  # reject 1.5 and friends
        if 0 <= day <= 6:
            days.add(day)

    if not days:
        return None
    return RepeatRule(days=tuple(sorted(days)))


def normalize_date(value: Any, today: date) -> str:
    """Return a YYYY-MM-DD string, falling back to `today`."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, str):
        trimmed = value.strip()
        if _ISO_DATE_RE.match(trimmed):
            return trimmed
        try:
            return datetime.fromisoformat(trimmed).date().isoformat()
        except ValueError:
            pass
        for fmt in _ALT_DATE_FORMATS:
            try:
                return datetime.strptime(trimmed, fmt).date().isoformat()
            except ValueError:
                continue
    return today.isoformat()


def normalize_time(value: Any) -> str:
    """Return HH:MM for well-formed input.

    Unparseable strings are returned trimmed but otherwise untouched so the
    occurrence calculator reports "no occurrence" for them.
    """
    if not isinstance(value, str) or not value.strip():
        return DEFAULT_TIME
    trimmed = value.strip()
    match = _TIME_RE.match(trimmed)
    if match is None:
        return trimmed
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return trimmed
    return f"{hour:02d}:{minute:02d}"


def _nullable_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def _coerce_id(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        return int(value)
    except (TypeError, ValueError):
        return fallback


def _coerce_ms(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    return int(value)


def _pick(raw: dict, camel: str, snake: str, default: Any = None) -> Any:
    if camel in raw:
        return raw[camel]
    return raw.get(snake, default)


def normalize_entry(raw: Any, now: datetime, index: int = 0) -> Schedule | None:
    """Build a Schedule from an arbitrary record (camelCase or snake_case keys).

    Returns None when `raw` is not a mapping at all.
    """
    if isinstance(raw, Schedule):
        raw = raw.to_dict()
    if not isinstance(raw, dict):
        return None

    now_ms = int(now.timestamp() * 1000)
    repeat = normalize_repeat(raw.get("repeat"))
    schedule_date = normalize_date(raw.get("date"), now.date())

    last_key = _nullable_text(_pick(raw, "lastOccurrenceKey", "last_occurrence_key"))
    if last_key is None and repeat is None:
        last_key = schedule_date

    title = raw.get("title")
    description = raw.get("description")
    created_at = _coerce_ms(_pick(raw, "createdAt", "created_at"), now_ms)

    return Schedule(
        id=_coerce_id(raw.get("id"), now_ms + index),
        title=title.strip() if isinstance(title, str) else "",
        description=description.strip() if isinstance(description, str) else "",
        date=schedule_date,
        time=normalize_time(raw.get("time")),
        repeat=repeat,
        pre_notified=bool(_pick(raw, "preNotified", "pre_notified", False)),
        start_notified=bool(_pick(raw, "startNotified", "start_notified", False)),
        last_occurrence_key=last_key,
        tts_message=_nullable_text(_pick(raw, "ttsMessage", "tts_message")),
        tts_lead_message=_nullable_text(_pick(raw, "ttsLeadMessage", "tts_lead_message")),
        created_at=created_at,
        updated_at=_coerce_ms(_pick(raw, "updatedAt", "updated_at"), created_at),
    )
