"""Notification port — abstract interface for desktop-style reminders.

Core modules depend on this protocol, never on a specific delivery channel.
"""

from __future__ import annotations

from typing import Protocol


class NotificationPort(Protocol):
    """Abstract notification interface used by the reminder dispatcher."""

    async def notify(self, title: str, body: str) -> None: ...
