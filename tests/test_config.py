"""Tests for src.config — Settings validation and loading."""

import pytest
from pydantic import ValidationError

from src.config import Settings, _load_settings


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert s.LEAD_MINUTES == 5
        assert s.COOLDOWN_SECONDS == 60
        assert s.NOTIFIER == "desktop"
        assert s.SYNC_URL == ""

    def test_string_values_are_coerced(self):
        s = Settings(LEAD_MINUTES=" 10 ", COOLDOWN_SECONDS="120", DISPATCH_TIMEOUT_SECONDS="2.5")
        assert s.LEAD_MINUTES == 10
        assert s.COOLDOWN_SECONDS == 120
        assert s.DISPATCH_TIMEOUT_SECONDS == 2.5

    def test_zero_lead_allowed(self):
        assert Settings(LEAD_MINUTES="0").LEAD_MINUTES == 0

    def test_negative_lead_rejected(self):
        with pytest.raises(ValidationError):
            Settings(LEAD_MINUTES="-1")

    @pytest.mark.parametrize("field", ["COOLDOWN_SECONDS", "DISPATCH_TIMEOUT_SECONDS"])
    def test_non_positive_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: "0"})

    def test_choices_are_lowercased(self):
        s = Settings(NOTIFIER=" Telegram ", SPEECH_ENGINE="LOG", LOG_LEVEL="Debug")
        assert s.NOTIFIER == "telegram"
        assert s.SPEECH_ENGINE == "log"
        assert s.LOG_LEVEL == "debug"


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("NOTIFIER", "log")
        monkeypatch.setenv("LEAD_MINUTES", "3")
        monkeypatch.setenv("SYNC_URL", "http://sync.local")
        s = _load_settings()
        assert s.LEAD_MINUTES == 3
        assert s.SYNC_URL == "http://sync.local"

    def test_telegram_without_token_exits(self, monkeypatch):
        monkeypatch.setenv("NOTIFIER", "telegram")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "")
        with pytest.raises(SystemExit):
            _load_settings()

    def test_telegram_placeholder_token_exits(self, monkeypatch):
        monkeypatch.setenv("NOTIFIER", "telegram")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "your-bot-token")
        with pytest.raises(SystemExit):
            _load_settings()
