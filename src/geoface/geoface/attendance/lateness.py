from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..common.datetime_utils import parse_hhmm


@dataclass(frozen=True)
class LatenessResult:
    is_late: bool
    minutes_late: int


def lateness_cutoff(check_in_time: datetime, start_time: str) -> datetime:
    """``start_time`` on the calendar date of ``check_in_time`` (same tzinfo)."""
    start = parse_hhmm(start_time)
    return check_in_time.replace(hour=start.hour, minute=start.minute, second=0, microsecond=0)


def evaluate_lateness(check_in_time: datetime, start_time: str) -> LatenessResult:
    """Classify a check-in against the daily start time.

    Arriving exactly at the cutoff is on time; anything strictly after it is
    late, with whole minutes rounded down.
    """
    cutoff = lateness_cutoff(check_in_time, start_time)
    if check_in_time <= cutoff:
        return LatenessResult(is_late=False, minutes_late=0)
    return LatenessResult(is_late=True, minutes_late=(check_in_time - cutoff) // timedelta(minutes=1))
