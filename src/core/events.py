"""Change broadcast bus.

The store emits one "schedules changed" event per batch of mutations; the
announcer, dashboards and other read-only consumers subscribe here. The
emitter never depends on who (if anyone) is listening.
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

Listener = Callable[[str], None]


class ChangeBus:
    """Synchronous fan-out of change scopes ("store", "notifications")."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, scope: str) -> None:
        for listener in list(self._listeners):
            try:
                listener(scope)
            except Exception as exc:
                logger.warning("Change listener %r failed for scope %r: %s", listener, scope, exc)
