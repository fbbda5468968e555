from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from ..core.constants import DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TelegramAddress:
    bot_token: str
    chat_id: str

    def __repr__(self) -> str:
        return f"TelegramAddress(chat_id={self.chat_id!r})"


class TelegramSink:
    """Send a text message through the Telegram Bot API."""

    def __init__(self, *, timeout_seconds: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS, session: Optional[requests.Session] = None):
        self._timeout = float(timeout_seconds)
        self._session = session or requests.Session()

    def send(self, address: TelegramAddress, text: str) -> None:
        url = f"https://api.telegram.org/bot{address.bot_token}/sendMessage"
        try:
            resp = self._session.post(url, json={"chat_id": address.chat_id, "text": text}, timeout=self._timeout)
        except requests.RequestException as e:
            # The bot token is part of the URL.
            raise NotificationError(f"Telegram request failed: {type(e).__name__}") from None

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.status_code != 200 or not data.get("ok"):
            raise NotificationError(f"Telegram API error (HTTP {resp.status_code}): {data.get('description', '')}")
        logger.info("Telegram message sent to chat %s", address.chat_id)
