"""Shared speech playback queue.

Texts submitted from anywhere in the process are spoken one at a time, in
submission order, by a single worker task draining into a SpeechPort.
`submit` returns immediately with a future that resolves when that text has
been spoken (or fails), so callers choose whether to wait.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.ports.speech_port import SpeechPort, VoiceOptions

logger = logging.getLogger(__name__)


class SpeechQueue:
    """Sequential consumer in front of a SpeechPort."""

    def __init__(self, speaker: SpeechPort, timeout_seconds: float | None = 60.0) -> None:
        self._speaker = speaker
        self._timeout = timeout_seconds
        self._queue: asyncio.Queue | None = None
        self._worker: asyncio.Task | None = None

    def submit(self, text: str, options: VoiceOptions) -> asyncio.Future:
        """Enqueue `text`. Must be called from inside the running event loop."""
        loop = asyncio.get_running_loop()
        if self._queue is None:
            self._queue = asyncio.Queue()
        future: asyncio.Future = loop.create_future()
        self._queue.put_nowait((text, options, future))
        if self._worker is None or self._worker.done():
            self._worker = loop.create_task(self._drain(self._queue))
        return future

    @property
    def pending(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    async def _drain(self, queue: asyncio.Queue) -> None:
        while True:
            text, options, future = await queue.get()
            try:
                if future.cancelled():
                    continue
                try:
                    await asyncio.wait_for(self._speaker.speak(text, options), timeout=self._timeout)
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as exc:
                    if not future.done():
                        future.set_exception(exc)
                else:
                    if not future.done():
                        future.set_result(None)
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Wait until every submitted text has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def close(self) -> None:
        """Stop the worker. Items still queued are cancelled."""
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        if self._queue is not None:
            while not self._queue.empty():
                _, _, future = self._queue.get_nowait()
                future.cancel()
                self._queue.task_done()
