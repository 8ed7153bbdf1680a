"""Telegram notification adapter — implements NotificationPort.

Wraps a telegram.Bot instance and delivers each reminder as one chat message
(title on the first line, body below).
"""

from __future__ import annotations

import logging

from telegram import Bot

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Telegram implementation of NotificationPort."""

    def __init__(self, bot: Bot, chat_id: int) -> None:
        self._bot = bot
        self._chat_id = chat_id

    async def notify(self, title: str, body: str) -> None:
        text = f"{title}\n{body}" if body else title
        await self._bot.send_message(chat_id=self._chat_id, text=text)
        logger.debug("Telegram reminder sent to chat %d", self._chat_id)
