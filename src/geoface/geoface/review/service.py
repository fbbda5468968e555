from __future__ import annotations

import logging
from typing import Optional

from ..attendance.lateness import evaluate_lateness
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..core.enums import VerificationStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..geo.distance import evaluate_geofence
from ..settings.model import AppSettings
from ..settings.service import SettingsService
from ..students.repository import StudentRepository
from .export import attendance_csv, recap_csv
from .model import AttendanceReviewRow, MonthlyRecap
from .recap import build_monthly_recap

logger = logging.getLogger(__name__)

REVIEW_TARGETS = {VerificationStatus.VERIFIED, VerificationStatus.REJECTED}


def to_review_row(record: AttendanceRecord, settings: AppSettings) -> AttendanceReviewRow:
    geofence = evaluate_geofence(record.location, settings.geofence)
    lateness = evaluate_lateness(record.check_in_time, settings.schedule.start_time)
    return AttendanceReviewRow(
        record=record,
        distance_meters=geofence.distance_meters,
        in_range=geofence.in_range,
        is_late=lateness.is_late,
        minutes_late=lateness.minutes_late,
    )


class AdminReviewService:
    """Use cases behind the admin dashboard: review, stats, exports, recap."""

    def __init__(self, records: AttendanceRepository, students: StudentRepository, settings: SettingsService):
        self._records = records
        self._students = students
        self._settings = settings

    def list_rows(self) -> list[AttendanceReviewRow]:
        settings = self._settings.get()
        return [to_review_row(r, settings) for r in self._records.list_all()]

    def stats(self) -> dict:
        records = self._records.list_all()
        out = {"total": len(records)}
        for status in VerificationStatus:
            out[status.value] = sum(1 for r in records if r.verification_status == status)
        return out

    def update_status(self, record_id: str, status: VerificationStatus | str, note: Optional[str] = None) -> bool:
        """Approve or reject a pending record.

        Returns False (and writes nothing) when the record already has that
        status; a second identical call is therefore a no-op.
        """
        try:
            status = VerificationStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown status {status!r}") from None
        if status not in REVIEW_TARGETS:
            raise ValidationError("Status must be verified or rejected")

        record = self._records.get_by_id(record_id)
        if not record:
            raise NotFoundError("Attendance record not found")

        if record.verification_status == status:
            return False
        if record.verification_status != VerificationStatus.PENDING:
            raise ValidationError(f"Record is already {record.verification_status.value}")

        new_note = note if note is not None else record.verification_note
        if not self._records.update_status(record.id, status, new_note):
            raise NotFoundError("Attendance record not found")
        logger.info("Record %s reviewed: %s -> %s", record.id, record.verification_status.value, status.value)
        return True

    def clear_records(self) -> None:
        self._records.clear()
        logger.warning("All attendance records cleared by admin")

    def export_csv(self) -> bytes:
        return attendance_csv(self.list_rows())

    def monthly_recap(self, month: str, *, class_name: Optional[str] = None) -> MonthlyRecap:
        return build_monthly_recap(
            self._records.list_all(),
            self._students.list_all(),
            month=month,
            class_name=class_name,
        )

    def export_recap_csv(self, month: str, *, class_name: Optional[str] = None) -> bytes:
        return recap_csv(self.monthly_recap(month, class_name=class_name))
