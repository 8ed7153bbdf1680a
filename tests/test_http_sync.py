"""Tests for src.adapters.http_sync — remote schedule mirror over HTTP."""

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from src.adapters.http_sync import HttpScheduleSync
from src.ports.storage_port import SyncError

_PATCH_CLIENT = "src.adapters.http_sync.httpx.AsyncClient"


def _mock_client(payload=None, put_side_effect=None):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client.put = AsyncMock(return_value=mock_resp, side_effect=put_side_effect)
    return mock_client


class TestHttpScheduleSync:
    @pytest.mark.asyncio
    async def test_puts_whole_array(self):
        records = [{"id": 1, "title": "Standup"}]
        mock_client = _mock_client(payload=records)

        with patch(_PATCH_CLIENT, return_value=mock_client):
            result = await HttpScheduleSync("http://sync.local/schedules").replace(records)

        assert result == records
        mock_client.put.assert_awaited_once_with("http://sync.local/schedules", json=records)

    @pytest.mark.asyncio
    async def test_accepts_items_envelope(self):
        mock_client = _mock_client(payload={"items": [{"id": 2}]})

        with patch(_PATCH_CLIENT, return_value=mock_client):
            result = await HttpScheduleSync("http://sync.local").replace([{"id": 2}])

        assert result == [{"id": 2}]

    @pytest.mark.asyncio
    async def test_unexpected_shape_raises(self):
        mock_client = _mock_client(payload={"ok": True})

        with patch(_PATCH_CLIENT, return_value=mock_client):
            with pytest.raises(SyncError, match="Unexpected"):
                await HttpScheduleSync("http://sync.local").replace([])

    @pytest.mark.asyncio
    async def test_transport_error_raises_sync_error(self):
        mock_client = _mock_client(put_side_effect=httpx.ConnectError("refused"))

        with patch(_PATCH_CLIENT, return_value=mock_client):
            with pytest.raises(SyncError, match="refused"):
                await HttpScheduleSync("http://sync.local").replace([])

    @pytest.mark.asyncio
    async def test_invalid_json_raises_sync_error(self):
        mock_client = _mock_client()
        mock_client.put.return_value.json.side_effect = ValueError("not json")

        with patch(_PATCH_CLIENT, return_value=mock_client):
            with pytest.raises(SyncError):
                await HttpScheduleSync("http://sync.local").replace([])
