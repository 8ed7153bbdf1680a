"""
Schedule Reminders — Service wiring.

Builds the store, speech queue, dispatcher and poller from settings, loads
the persisted schedules and runs the poller until interrupted.

This module is the only place that picks concrete adapters; everything in
src.core depends on ports.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.config import settings
from src.core.dispatcher import ReminderDispatcher
from src.core.poller import NotificationPoller
from src.core.schedule_store import ScheduleStore
from src.core.upcoming import upcoming_schedules
from src.adapters.speech_queue import SpeechQueue

logger = logging.getLogger(__name__)


@dataclass
class ReminderService:
    """The assembled reminder engine."""

    store: ScheduleStore
    speech: SpeechQueue
    dispatcher: ReminderDispatcher
    poller: NotificationPoller

    async def start(self) -> None:
        self.store.load()
        self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()
        await self.speech.join()
        await self.speech.close()
        await self.store.drain()


def build_service() -> ReminderService:
    """Wire the default adapters from settings."""
    from src.adapters.adapter_factory import create_notifier, create_speaker, create_sync
    from src.data.db import ScheduleDB

    store = ScheduleStore(ScheduleDB(settings.DATABASE_PATH), sync=create_sync())
    speech = SpeechQueue(create_speaker())
    dispatcher = ReminderDispatcher(
        notifier=create_notifier(),
        speech=speech,
        lead_minutes=settings.LEAD_MINUTES,
        timeout_seconds=settings.DISPATCH_TIMEOUT_SECONDS,
        speaker_id=settings.VOICEVOX_SPEAKER_ID,
    )
    poller = NotificationPoller(
        store,
        dispatcher,
        lead_minutes=settings.LEAD_MINUTES,
        cooldown=timedelta(seconds=settings.COOLDOWN_SECONDS),
    )

    def _log_upcoming(scope: str) -> None:
        items = upcoming_schedules(store.list(), datetime.now())
        if not items:
            logger.debug("Schedules changed (%s): nothing in the next 24 h", scope)
            return
        summary = ", ".join(f"{i.day_label} {i.time_label} {i.title}" for i in items)
        logger.info("Schedules changed (%s), upcoming: %s", scope, summary)

    store.bus.subscribe(_log_upcoming)

    return ReminderService(store=store, speech=speech, dispatcher=dispatcher, poller=poller)


async def run() -> None:
    """Start the service and keep it alive until cancelled."""
    service = build_service()
    await service.start()
    try:
        await asyncio.Event().wait()
    finally:
        await service.stop()


def main() -> None:
    """Entry point: configure logging and run the reminder loop."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting schedule reminder service...")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    main()
