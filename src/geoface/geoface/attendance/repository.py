from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import VerificationStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def append(self, record: AttendanceRecord) -> None:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def update_status(self, record_id: str, status: VerificationStatus, note: Optional[str] = None) -> bool:
        """Overwrite status/note; returns False when the record does not exist."""

        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        """All records, most recent check-in first. Empty on first use."""

        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError
