"""Log-only adapters for headless runs and local development.

They satisfy NotificationPort and SpeechPort by writing to the log instead
of a real output channel.
"""

from __future__ import annotations

import logging

from src.ports.speech_port import VoiceOptions

logger = logging.getLogger(__name__)


class LogNotifier:
    """NotificationPort that only logs."""

    async def notify(self, title: str, body: str) -> None:
        logger.info("[notify] %s | %s", title, body.replace("\n", " / "))


class LogSpeaker:
    """SpeechPort that only logs."""

    async def speak(self, text: str, options: VoiceOptions) -> None:
        logger.info("[speak speaker=%s speed=%.2f] %s", options.speaker_id, options.speed_scale, text)
