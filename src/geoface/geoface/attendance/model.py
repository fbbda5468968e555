from __future__ import annotations

import base64
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_epoch_ms
from ..core.enums import VerificationStatus
from ..geo.model import Coordinate


@dataclass(frozen=True)
class AttendanceRecord:
    """One completed check-in.

    Only ``verification_status``/``verification_note`` may change after the
    record is stored, and only through the admin review surface.
    """

    id: str
    student_id: str
    student_name: str
    check_in_time: datetime
    location: Coordinate
    selfie_image: bytes
    verification_status: VerificationStatus
    verification_note: Optional[str] = None

    @property
    def check_in_epoch_ms(self) -> int:
        return to_epoch_ms(self.check_in_time)

    def with_review(self, status: VerificationStatus, note: Optional[str]) -> "AttendanceRecord":
        return replace(self, verification_status=status, verification_note=note)

    def selfie_data_url(self) -> str:
        return "data:image/jpeg;base64," + base64.b64encode(self.selfie_image).decode("ascii")

    def to_dict(self, *, include_selfie: bool = False) -> dict:
        out = {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "timestamp": self.check_in_epoch_ms,
            "location": self.location.to_dict(),
            "verification_status": self.verification_status.value,
            "verification_note": self.verification_note,
        }
        if include_selfie:
            out["selfie_url"] = self.selfie_data_url()
        return out
