from __future__ import annotations

from datetime import date, datetime, time

from ..core.exceptions import ValidationError


def parse_hhmm(value: str) -> time:
    """Parse an ``"HH:MM"`` string into a time (seconds are zero)."""
    try:
        return datetime.strptime(str(value).strip(), "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid time {value!r}, expected HH:MM") from None


def parse_year_month(value: str) -> date:
    """Parse ``"YYYY-MM"`` into the first day of that month."""
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m").date()
    except ValueError:
        raise ValidationError(f"Invalid month {value!r}, expected YYYY-MM") from None


def to_epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int | float) -> datetime:
    return datetime.fromtimestamp(float(value) / 1000.0)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock it easier.
    """
    return datetime.now()
