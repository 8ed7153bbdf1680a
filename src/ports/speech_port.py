"""Speech port — abstract interface for spoken reminders.

The dispatcher never talks to a speech engine directly; it submits text to
the shared SpeechQueue, which drains into an implementation of this port.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


class SpeechError(Exception):
    """Raised when synthesis or playback fails."""


@dataclass(frozen=True)
class VoiceOptions:
    """Engine-agnostic voice parameters."""

    speaker_id: int | None = None
    speed_scale: float = 1.0


class SpeechPort(Protocol):
    """Abstract speech interface: returns once the text has been spoken."""

    async def speak(self, text: str, options: VoiceOptions) -> None: ...
