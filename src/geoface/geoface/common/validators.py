from __future__ import annotations

import math
from typing import Any

from ..core.exceptions import ValidationError


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_float(value: Any, field_name: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number") from None
    if not math.isfinite(out):
        raise ValidationError(f"{field_name} must be finite")
    return out


def require_positive(value: Any, field_name: str) -> float:
    out = require_float(value, field_name)
    if out <= 0:
        raise ValidationError(f"{field_name} must be greater than 0")
    return out
