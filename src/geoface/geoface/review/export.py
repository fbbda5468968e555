"""CSV writers for the admin exports (UTF-8 with BOM so Excel opens them)."""
from __future__ import annotations

import csv
import io
from typing import Sequence

from .model import AttendanceReviewRow, MonthlyRecap

ATTENDANCE_HEADER = ["ID", "Name", "Date", "Time", "Status", "Is Late", "Minutes Late", "Distance", "Record ID"]


def attendance_csv(rows: Sequence[AttendanceReviewRow]) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(ATTENDANCE_HEADER)
    for row in rows:
        r = row.record
        writer.writerow(
            [
                r.student_id,
                r.student_name,
                r.check_in_time.strftime("%Y-%m-%d"),
                r.check_in_time.strftime("%H:%M:%S"),
                r.verification_status.value,
                "Yes" if row.is_late else "No",
                row.minutes_late,
                f"{row.distance_meters:.0f}m",
                r.id,
            ]
        )
    return out.getvalue().encode("utf-8-sig")


def recap_csv(recap: MonthlyRecap) -> bytes:
    out = io.StringIO()
    writer = csv.writer(out)
    writer.writerow(["Student ID", "Name", "Class", *[str(d.day) for d in recap.days], "Present", "Absent", "Percent"])
    for row in recap.rows:
        writer.writerow(
            [
                row.student.student_id,
                row.student.name,
                row.student.class_name or "-",
                *row.marks,
                row.present,
                row.absent,
                f"{row.percent}%",
            ]
        )
    return out.getvalue().encode("utf-8-sig")
