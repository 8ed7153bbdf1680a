"""Tests for src.adapters.speech_queue — SpeechQueue ordering and failures."""

import asyncio

import pytest

from src.adapters.speech_queue import SpeechQueue
from src.ports.speech_port import SpeechError, VoiceOptions

OPTS = VoiceOptions()


class RecordingSpeaker:
    """SpeechPort double that records what it spoke, one at a time."""

    def __init__(self, fail_on=None, delay=0.0):
        self.spoken = []
        self.active = 0
        self.max_active = 0
        self._fail_on = fail_on
        self._delay = delay

    async def speak(self, text, options):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self._delay)
            if text == self._fail_on:
                raise SpeechError(f"cannot say {text}")
            self.spoken.append(text)
        finally:
            self.active -= 1


class TestSpeechQueue:
    @pytest.mark.asyncio
    async def test_speaks_in_submission_order(self):
        speaker = RecordingSpeaker(delay=0.001)
        queue = SpeechQueue(speaker)

        futures = [queue.submit(text, OPTS) for text in ("one", "two", "three")]
        await asyncio.gather(*futures)

        assert speaker.spoken == ["one", "two", "three"]
        assert speaker.max_active == 1
        await queue.close()

    @pytest.mark.asyncio
    async def test_failure_resolves_only_that_future(self):
        speaker = RecordingSpeaker(fail_on="bad")
        queue = SpeechQueue(speaker)

        bad = queue.submit("bad", OPTS)
        good = queue.submit("good", OPTS)

        with pytest.raises(SpeechError):
            await bad
        await good
        assert speaker.spoken == ["good"]
        await queue.close()

    @pytest.mark.asyncio
    async def test_slow_speaker_times_out(self):
        queue = SpeechQueue(RecordingSpeaker(delay=1), timeout_seconds=0.01)
        with pytest.raises(asyncio.TimeoutError):
            await queue.submit("slow", OPTS)
        await queue.close()

    @pytest.mark.asyncio
    async def test_join_waits_for_everything(self):
        speaker = RecordingSpeaker(delay=0.001)
        queue = SpeechQueue(speaker)
        queue.submit("a", OPTS)
        queue.submit("b", OPTS)
        assert queue.pending == 2

        await queue.join()

        assert speaker.spoken == ["a", "b"]
        assert queue.pending == 0
        await queue.close()

    @pytest.mark.asyncio
    async def test_close_cancels_queued_items(self):
        queue = SpeechQueue(RecordingSpeaker(delay=1))
        first = queue.submit("first", OPTS)
        second = queue.submit("second", OPTS)
        await asyncio.sleep(0)

        await queue.close()

        assert first.cancelled()
        assert second.cancelled()

    @pytest.mark.asyncio
    async def test_worker_restarts_after_close(self):
        speaker = RecordingSpeaker()
        queue = SpeechQueue(speaker)
        await queue.submit("a", OPTS)
        await queue.close()

        await queue.submit("b", OPTS)

        assert speaker.spoken == ["a", "b"]
        await queue.close()

    @pytest.mark.asyncio
    async def test_close_without_submit(self):
        await SpeechQueue(RecordingSpeaker()).close()
