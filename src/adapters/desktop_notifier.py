"""Desktop notification adapter — implements NotificationPort via notify-send.

Runs `notify-send` as an asyncio subprocess so a stuck notification daemon
cannot block the event loop.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging

logger = logging.getLogger(__name__)

_URGENCIES = ("low", "normal", "critical")


class DesktopNotifier:
    """Freedesktop notification implementation of NotificationPort."""

    def __init__(self, app_name: str = "Schedule Reminders", urgency: str = "normal") -> None:
        self._app_name = app_name
        self._urgency = urgency if urgency in _URGENCIES else "normal"

    async def notify(self, title: str, body: str) -> None:
        cmd = [
            "notify-send",
            f"--urgency={self._urgency}",
            f"--app-name={self._app_name}",
            title,
        ]
        if body:
            cmd.append(body)

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
            logger.warning("Killed unresponsive notify-send (pid %s)", proc.pid)
            raise

        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            raise RuntimeError(f"notify-send exited with {proc.returncode}: {message}")
