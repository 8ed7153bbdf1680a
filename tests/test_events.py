"""Tests for src.core.events — ChangeBus."""

from unittest.mock import MagicMock

from src.core.events import ChangeBus


def test_emit_reaches_every_listener():
    bus = ChangeBus()
    a, b = MagicMock(), MagicMock()
    bus.subscribe(a)
    bus.subscribe(b)

    bus.emit("store")

    a.assert_called_once_with("store")
    b.assert_called_once_with("store")


def test_unsubscribe():
    bus = ChangeBus()
    listener = MagicMock()
    unsubscribe = bus.subscribe(listener)
    unsubscribe()
    unsubscribe()

    bus.emit("notifications")

    listener.assert_not_called()


def test_failing_listener_does_not_stop_others():
    bus = ChangeBus()
    after = MagicMock()
    bus.subscribe(MagicMock(side_effect=RuntimeError("boom")))
    bus.subscribe(after)

    bus.emit("store")

    after.assert_called_once_with("store")


def test_emit_without_listeners():
    ChangeBus().emit("store")
