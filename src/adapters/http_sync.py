"""Remote schedule sync over HTTP — implements ScheduleSync.

PUTs the whole schedule array to SYNC_URL and expects the server's
normalized copy back. Any failure is raised as SyncError; the store logs it
and carries on with its local copy.
"""

from __future__ import annotations

import logging

import httpx

from src.ports.storage_port import SyncError

logger = logging.getLogger(__name__)

_TIMEOUT_SECONDS = 5


class HttpScheduleSync:
    """httpx implementation of ScheduleSync."""

    def __init__(self, url: str, timeout: float = _TIMEOUT_SECONDS) -> None:
        self._url = url
        self._timeout = timeout

    async def replace(self, records: list[dict]) -> list[dict]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.put(self._url, json=records)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise SyncError(f"Schedule sync to {self._url} failed: {exc}") from exc

        items = data.get("items") if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise SyncError(f"Unexpected sync response shape: {type(data).__name__}")
        logger.debug("Synced %d schedule(s) to %s", len(items), self._url)
        return items
