"""
Schedule Reminders — Centralized configuration.

Loads all settings from .env and validates them.
This module is the foundation for every other module in the project.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Persistence
    DATABASE_PATH: str = "data/schedules.db"
    SYNC_URL: str = ""               # empty → local copy only

    # Reminder timing
    LEAD_MINUTES: int = 5            # 0 disables the lead reminder
    COOLDOWN_SECONDS: int = 60
    DISPATCH_TIMEOUT_SECONDS: float = 10.0

    # Notification channel: "desktop" | "telegram" | "log"
    NOTIFIER: str = "desktop"
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: int = 0

    # Speech: "voicevox" | "log"
    SPEECH_ENGINE: str = "voicevox"
    VOICEVOX_URL: str = "http://127.0.0.1:50021"
    VOICEVOX_SPEAKER_ID: int = 1
    AUDIO_DEVICE: str = "default"

    LOG_LEVEL: str = "INFO"

    @field_validator("LEAD_MINUTES", "COOLDOWN_SECONDS", "VOICEVOX_SPEAKER_ID", "TELEGRAM_CHAT_ID", mode="before")
    @classmethod
    def parse_int(cls, v: str | int) -> int:
        if isinstance(v, str):
            v = v.strip() or "0"
        return int(v)

    @field_validator("LEAD_MINUTES")
    @classmethod
    def check_lead(cls, v: int) -> int:
        if v < 0:
            raise ValueError("LEAD_MINUTES must be >= 0")
        return v

    @field_validator("COOLDOWN_SECONDS", "DISPATCH_TIMEOUT_SECONDS")
    @classmethod
    def check_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("NOTIFIER", "SPEECH_ENGINE", "LOG_LEVEL", mode="before")
    @classmethod
    def lower_choice(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v


def _load_settings() -> Settings:
    """Load settings from environment, validating required keys."""
    notifier = os.getenv("NOTIFIER", "desktop")
    token = os.getenv("TELEGRAM_BOT_TOKEN", "")

    if notifier.strip().lower() == "telegram" and (not token or token.startswith("your-")):
        print("ERROR: NOTIFIER=telegram but TELEGRAM_BOT_TOKEN is missing in .env", file=sys.stderr)
        sys.exit(1)

    return Settings(
        DATABASE_PATH=os.getenv("DATABASE_PATH", "data/schedules.db"),
        SYNC_URL=os.getenv("SYNC_URL", ""),
        LEAD_MINUTES=os.getenv("LEAD_MINUTES", "5"),
        COOLDOWN_SECONDS=os.getenv("COOLDOWN_SECONDS", "60"),
        DISPATCH_TIMEOUT_SECONDS=os.getenv("DISPATCH_TIMEOUT_SECONDS", "10"),
        NOTIFIER=notifier,
        TELEGRAM_BOT_TOKEN=token,
        TELEGRAM_CHAT_ID=os.getenv("TELEGRAM_CHAT_ID", "0"),
        SPEECH_ENGINE=os.getenv("SPEECH_ENGINE", "voicevox"),
        VOICEVOX_URL=os.getenv("VOICEVOX_URL", "http://127.0.0.1:50021"),
        VOICEVOX_SPEAKER_ID=os.getenv("VOICEVOX_SPEAKER_ID", "1"),
        AUDIO_DEVICE=os.getenv("AUDIO_DEVICE", "default"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )


# Singleton — imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
