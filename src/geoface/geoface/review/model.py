from __future__ import annotations

from dataclasses import dataclass, field

from ..attendance.model import AttendanceRecord
from ..students.model import Student


@dataclass(frozen=True)
class AttendanceReviewRow:
    """Read-model for the admin table/export.

    Distance and lateness are derived from the *current* settings every time.
    """

    record: AttendanceRecord
    distance_meters: float
    in_range: bool
    is_late: bool
    minutes_late: int

    def to_dict(self, *, include_selfie: bool = False) -> dict:
        out = self.record.to_dict(include_selfie=include_selfie)
        out.update(
            {
                "date": self.record.check_in_time.strftime("%Y-%m-%d"),
                "time": self.record.check_in_time.strftime("%H:%M:%S"),
                "distance_meters": round(self.distance_meters),
                "in_range": self.in_range,
                "is_late": self.is_late,
                "minutes_late": self.minutes_late,
            }
        )
        return out


@dataclass(frozen=True)
class RecapDay:
    day: int
    is_weekend: bool


@dataclass(frozen=True)
class RecapRow:
    student: Student
    marks: list[str]
    present: int
    absent: int
    percent: int


@dataclass(frozen=True)
class MonthlyRecap:
    month: str
    days: list[RecapDay] = field(default_factory=list)
    rows: list[RecapRow] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "days": [{"day": d.day, "is_weekend": d.is_weekend} for d in self.days],
            "rows": [
                {
                    "student_id": r.student.student_id,
                    "name": r.student.name,
                    "class_name": r.student.class_name,
                    "marks": r.marks,
                    "present": r.present,
                    "absent": r.absent,
                    "percent": r.percent,
                }
                for r in self.rows
            ],
        }
