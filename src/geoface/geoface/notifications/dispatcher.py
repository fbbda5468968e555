from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Optional, Protocol

from .telegram import TelegramAddress

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def send(self, address: TelegramAddress, text: str) -> None:
        raise NotImplementedError


class NotificationDispatcher:
    """Best-effort, fire-and-forget delivery.

    ``dispatch`` returns immediately; failures are logged and never retried.
    """

    def __init__(self, sink: NotificationSink, *, executor: Optional[Executor] = None):
        self._sink = sink
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="geoface-notify")

    def dispatch(self, address: TelegramAddress, message: str) -> None:
        try:
            self._executor.submit(self._send_safely, address, message)
        except RuntimeError:
            logger.exception("Notification executor rejected message for %r", address)

    def _send_safely(self, address: TelegramAddress, message: str) -> None:
        try:
            self._sink.send(address, message)
        except Exception:
            logger.exception("Notification to %r failed", address)

    def shutdown(self, *, wait: bool = False) -> None:
        shutdown = getattr(self._executor, "shutdown", None)
        if shutdown:
            shutdown(wait=wait)
