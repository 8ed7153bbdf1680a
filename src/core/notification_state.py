"""Notification state tracker — per-schedule lead/start flags.

The flags of a recurring schedule belong to exactly one occurrence, named by
`last_occurrence_key`. `rearm` is the only transition that moves them to a
new occurrence, and it always clears both flags in the same step.
"""

from __future__ import annotations

import logging
from datetime import datetime

from src.core.occurrence import get_next_occurrence
from src.data.models import Schedule

logger = logging.getLogger(__name__)


def rearm(schedule: Schedule, key: str | None) -> bool:
    """Point a recurring schedule's flags at occurrence `key`.

    Returns True (dirty) when the key changed and both flags were cleared.
    One-off schedules and empty keys are left alone.
    """
    if schedule.repeat is None or not key:
        return False
    if key == schedule.last_occurrence_key:
        return False

    logger.debug(
        "Re-arming schedule #%s: %s -> %s",
        schedule.id, schedule.last_occurrence_key, key,
    )
    schedule.last_occurrence_key = key
    schedule.pre_notified = False
    schedule.start_notified = False
    return True


def repair_legacy_flags(
    schedule: Schedule,
    legacy_notified: bool,
    occurs_at: datetime | None,
    now: datetime,
) -> bool:
    """Heal records that stored `notified` without either sub-flag.

    A still-future occurrence only had its lead reminder delivered; a past
    one is treated as fully handled. Returns True when a flag was set.
    """
    if not legacy_notified or schedule.pre_notified or schedule.start_notified:
        return False

    schedule.pre_notified = True
    if occurs_at is None or occurs_at <= now:
        schedule.start_notified = True
    logger.info(
        "Repaired legacy notified flag on schedule #%s (pre=%s, start=%s)",
        schedule.id, schedule.pre_notified, schedule.start_notified,
    )
    return True


def initialize_occurrence_key(schedule: Schedule, now: datetime) -> bool:
    """Fill in a missing `last_occurrence_key`. Returns True when set."""
    if schedule.last_occurrence_key:
        return False

    if schedule.repeat is None:
        schedule.last_occurrence_key = schedule.date or None
        return schedule.last_occurrence_key is not None

    occurrence = get_next_occurrence(schedule, now)
    if occurrence is None:
        return False
    schedule.last_occurrence_key = occurrence.key
    return True


def reset_flags(schedule: Schedule) -> None:
    schedule.pre_notified = False
    schedule.start_notified = False


def mark_lead(schedule: Schedule) -> None:
    schedule.pre_notified = True


def mark_start(schedule: Schedule) -> None:
    """Record the start reminder; a started occurrence has no lead left to send."""
    schedule.start_notified = True
    schedule.pre_notified = True


def mark_handled(schedule: Schedule) -> None:
    """Close an occurrence whose window passed without dispatching."""
    schedule.pre_notified = True
    schedule.start_notified = True
