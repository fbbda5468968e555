from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_epoch_ms
from ..core.enums import CheckInErrorKind, IdentitySource, VerificationStatus
from ..geo.model import Coordinate
from ..verification.model import ExtractedIdentity, SelfieVerdict


@dataclass(frozen=True)
class CheckInError:
    """Inline error shown next to the control that triggered it."""

    kind: CheckInErrorKind
    message: str

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


@dataclass
class CheckInSessionData:
    """Everything collected so far in one session; discarded on abort."""

    permissions_granted_at: Optional[datetime] = None
    permission_fix_at: Optional[datetime] = None
    identity: Optional[ExtractedIdentity] = None
    identity_source: Optional[IdentitySource] = None
    selfie_image: Optional[bytes] = None
    verdict: Optional[SelfieVerdict] = None
    location: Optional[Coordinate] = None


@dataclass(frozen=True)
class CheckInSummary:
    """What the completion screen shows."""

    record_id: str
    student_id: str
    student_name: str
    check_in_time: datetime
    is_late: bool
    minutes_late: int
    distance_meters: float
    in_range: bool
    verification_status: VerificationStatus

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "timestamp": to_epoch_ms(self.check_in_time),
            "time": self.check_in_time.strftime("%H:%M"),
            "is_late": self.is_late,
            "minutes_late": self.minutes_late,
            "distance_meters": round(self.distance_meters, 1),
            "in_range": self.in_range,
            "verification_status": self.verification_status.value,
        }
