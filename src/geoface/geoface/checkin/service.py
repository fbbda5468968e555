from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable

from ..core.exceptions import NotFoundError
from .machine import CheckInStateMachine

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 500


class CheckInService:
    """Holds the live check-in sessions of this process.

    Every ``start`` builds a fresh machine with empty session data. The
    oldest sessions are dropped once ``max_sessions`` is exceeded.
    """

    def __init__(self, machine_factory: Callable[[], CheckInStateMachine], *, max_sessions: int = DEFAULT_MAX_SESSIONS):
        self._factory = machine_factory
        self._max_sessions = int(max_sessions)
        self._sessions: "OrderedDict[str, CheckInStateMachine]" = OrderedDict()
        self._lock = threading.Lock()

    def start(self) -> CheckInStateMachine:
        machine = self._factory()
        with self._lock:
            self._sessions[machine.session_id] = machine
            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Check-in session %s evicted", evicted)
        logger.info("Check-in session %s started", machine.session_id)
        return machine

    def get(self, session_id: str) -> CheckInStateMachine:
        with self._lock:
            machine = self._sessions.get(session_id or "")
        if machine is None:
            raise NotFoundError("Check-in session not found. Please start again.")
        return machine

    def discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
