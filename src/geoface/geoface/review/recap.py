from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import parse_year_month
from ..core.enums import VerificationStatus
from ..students.model import Student
from .model import MonthlyRecap, RecapDay, RecapRow

MARK_PRESENT = "v"
MARK_WEEKEND = "-"
MARK_ABSENT = "x"


def build_monthly_recap(
    records: Iterable[AttendanceRecord],
    students: Sequence[Student],
    *,
    month: str,
    class_name: Optional[str] = None,
) -> MonthlyRecap:
    """Per-student day grid for one month.

    Only *verified* records count as present; Saturdays and Sundays are not
    working days.
    """
    first = parse_year_month(month)
    _, n_days = calendar.monthrange(first.year, first.month)
    days = [RecapDay(day=d, is_weekend=date(first.year, first.month, d).weekday() >= 5) for d in range(1, n_days + 1)]
    working_days = sum(1 for d in days if not d.is_weekend)

    present_days: dict[str, set[int]] = {}
    for r in records:
        t = r.check_in_time
        if r.verification_status != VerificationStatus.VERIFIED:
            continue
        if t.year != first.year or t.month != first.month:
            continue
        present_days.setdefault(r.student_id, set()).add(t.day)

    rows: list[RecapRow] = []
    for s in students:
        if class_name and s.class_name != class_name:
            continue

        seen = present_days.get(s.student_id, set())
        marks: list[str] = []
        present = absent = present_working = 0
        for d in days:
            if d.day in seen:
                marks.append(MARK_PRESENT)
                present += 1
                if not d.is_weekend:
                    present_working += 1
            elif d.is_weekend:
                marks.append(MARK_WEEKEND)
            else:
                marks.append(MARK_ABSENT)
                absent += 1

        percent = round(present_working * 100 / working_days) if working_days else 0
        rows.append(RecapRow(student=s, marks=marks, present=present, absent=absent, percent=percent))

    return MonthlyRecap(month=first.strftime("%Y-%m"), days=days, rows=rows)
