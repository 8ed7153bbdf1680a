"""Reminder dispatcher — turns a firing decision into user-visible output.

Each dispatch (a) awaits a notification through the NotificationPort, bounded
by a timeout, and (b) enqueues the spoken text on the shared SpeechQueue
without waiting for playback. Failures of either half are logged for that
schedule only; the caller has already recorded the flag, so nothing is
retried.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from src.core import messages
from src.ports.speech_port import VoiceOptions

if TYPE_CHECKING:
    from src.adapters.speech_queue import SpeechQueue
    from src.core.occurrence import Occurrence
    from src.data.models import Schedule
    from src.ports.notification_port import NotificationPort

logger = logging.getLogger(__name__)

LEAD_SPEED_SCALE = 1.05
START_SPEED_SCALE = 1.0


class ReminderDispatcher:
    """Delivers lead and start reminders for one schedule occurrence."""

    def __init__(
        self,
        notifier: NotificationPort,
        speech: SpeechQueue | None,
        clock: Callable[[], datetime] = datetime.now,
        lead_minutes: int = 5,
        timeout_seconds: float = 10.0,
        speaker_id: int | None = None,
    ) -> None:
        self._notifier = notifier
        self._speech = speech
        self._clock = clock
        self._lead_minutes = lead_minutes
        self._timeout = timeout_seconds
        self._speaker_id = speaker_id

    async def dispatch_lead(self, schedule: Schedule, occurrence: Occurrence) -> None:
        logger.info(
            "Lead reminder for #%s '%s' (%s)", schedule.id, schedule.title, occurrence.occurs_at,
        )
        await self._notify(
            schedule,
            messages.notification_title(schedule),
            messages.lead_body(occurrence, self._lead_minutes),
        )
        text = messages.build_lead_speech(schedule, occurrence, self._clock(), self._lead_minutes)
        self._speak(schedule, text, VoiceOptions(self._speaker_id, LEAD_SPEED_SCALE))

    async def dispatch_start(self, schedule: Schedule, occurrence: Occurrence) -> None:
        logger.info(
            "Start reminder for #%s '%s' (%s)", schedule.id, schedule.title, occurrence.occurs_at,
        )
        await self._notify(
            schedule,
            messages.notification_title(schedule),
            messages.start_body(schedule),
        )
        text = messages.build_start_speech(schedule, occurrence, self._clock())
        self._speak(schedule, text, VoiceOptions(self._speaker_id, START_SPEED_SCALE))

    async def _notify(self, schedule: Schedule, title: str, body: str) -> None:
        try:
            await asyncio.wait_for(self._notifier.notify(title, body), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.error(
                "Notification for schedule #%s timed out after %.1fs", schedule.id, self._timeout,
            )
        except Exception as exc:
            logger.error("Notification for schedule #%s failed: %s", schedule.id, exc)

    def _speak(self, schedule: Schedule, text: str, options: VoiceOptions) -> None:
        if self._speech is None:
            return
        try:
            future = self._speech.submit(text, options)
        except Exception as exc:
            logger.error("Could not queue speech for schedule #%s: %s", schedule.id, exc)
            return

        def _log_result(done: asyncio.Future) -> None:
            if done.cancelled():
                logger.warning("Speech for schedule #%s was cancelled", schedule.id)
                return
            exc = done.exception()
            if exc is not None:
                logger.error("Speech for schedule #%s failed: %s", schedule.id, exc)

        future.add_done_callback(_log_result)
