"""Adapter factory — creates the right output adapters based on config."""

from __future__ import annotations

from src.config import settings
from src.ports.notification_port import NotificationPort
from src.ports.speech_port import SpeechPort
from src.ports.storage_port import ScheduleSync


def create_notifier() -> NotificationPort:
    """Return the notification adapter matching the NOTIFIER setting."""
    kind = settings.NOTIFIER.lower()

    if kind == "desktop":
        from src.adapters.desktop_notifier import DesktopNotifier

        return DesktopNotifier()

    if kind == "telegram":
        from telegram import Bot

        from src.adapters.telegram_notifier import TelegramNotifier

        return TelegramNotifier(Bot(settings.TELEGRAM_BOT_TOKEN), settings.TELEGRAM_CHAT_ID)

    if kind == "log":
        from src.adapters.log_adapters import LogNotifier

        return LogNotifier()

    raise ValueError(f"Unknown NOTIFIER: {kind!r}")


def create_speaker() -> SpeechPort:
    """Return the speech adapter matching the SPEECH_ENGINE setting."""
    engine = settings.SPEECH_ENGINE.lower()

    if engine == "voicevox":
        from src.adapters.voicevox_speaker import VoicevoxSpeaker

        return VoicevoxSpeaker(
            base_url=settings.VOICEVOX_URL,
            default_speaker_id=settings.VOICEVOX_SPEAKER_ID,
            audio_device=settings.AUDIO_DEVICE,
        )

    if engine == "log":
        from src.adapters.log_adapters import LogSpeaker

        return LogSpeaker()

    raise ValueError(f"Unknown SPEECH_ENGINE: {engine!r}")


def create_sync() -> ScheduleSync | None:
    """Return the remote sync client, or None when SYNC_URL is unset."""
    if not settings.SYNC_URL:
        return None

    from src.adapters.http_sync import HttpScheduleSync

    return HttpScheduleSync(settings.SYNC_URL)
