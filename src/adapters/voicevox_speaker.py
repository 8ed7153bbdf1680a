"""VOICEVOX speech adapter — implements SpeechPort.

Synthesizes speech through a local VOICEVOX engine (audio_query, then
synthesis) and plays the resulting WAV with `aplay`. Playback finishes
before `speak` returns, so the SpeechQueue never overlaps two reminders.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import tempfile
from pathlib import Path

import httpx

from src.ports.speech_port import SpeechError, VoiceOptions

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 15


class VoicevoxSpeaker:
    """VOICEVOX + aplay implementation of SpeechPort."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:50021",
        default_speaker_id: int = 1,
        audio_device: str = "default",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._default_speaker_id = default_speaker_id
        self._audio_device = audio_device

    async def synthesize(self, text: str, options: VoiceOptions) -> bytes:
        """Return WAV bytes for `text`. Raises SpeechError on any HTTP failure."""
        speaker = options.speaker_id if options.speaker_id is not None else self._default_speaker_id
        try:
            async with httpx.AsyncClient(base_url=self._base_url, timeout=_TIMEOUT_SECONDS) as client:
                query_resp = await client.post(
                    "/audio_query", params={"text": text, "speaker": speaker},
                )
                query_resp.raise_for_status()
                query = query_resp.json()
                query["speedScale"] = options.speed_scale

                synth_resp = await client.post(
                    "/synthesis", params={"speaker": speaker}, json=query,
                )
                synth_resp.raise_for_status()
                return synth_resp.content
        except httpx.HTTPError as exc:
            raise SpeechError(f"VOICEVOX request failed: {exc}") from exc

    async def speak(self, text: str, options: VoiceOptions) -> None:
        audio = await self.synthesize(text, options)
        with tempfile.TemporaryDirectory() as tmp:
            wav_path = Path(tmp) / "reminder.wav"
            wav_path.write_bytes(audio)
            await self._play(wav_path)

    async def _play(self, wav_path: Path) -> None:
        try:
            proc = await asyncio.create_subprocess_exec(
                "aplay", "-q", "-D", self._audio_device, str(wav_path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as exc:
            raise SpeechError("aplay not found, cannot play reminder audio") from exc

        try:
            _, stderr = await proc.communicate()
        except asyncio.CancelledError:
            # timed out or queue closed: stop playback before the next item starts
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
                await proc.wait()
            logger.warning("Stopped aplay (pid %s) mid-playback", proc.pid)
            raise

        if proc.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            raise SpeechError(f"aplay exited with {proc.returncode}: {message}")
        logger.debug("Played %s on %s", wav_path.name, self._audio_device)
