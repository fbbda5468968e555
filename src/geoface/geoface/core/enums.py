from __future__ import annotations

from enum import Enum


class VerificationStatus(str, Enum):
    """Verification state of a stored attendance record."""

    VERIFIED = "verified"
    PENDING = "pending"
    REJECTED = "rejected"


class CheckInStep(str, Enum):
    """Steps of one check-in session."""

    AWAITING_PERMISSIONS = "awaiting_permissions"
    CHOOSING_METHOD = "choosing_method"
    SCANNING_ID = "scanning_id"
    CONFIRMING_ID = "confirming_id"
    CAPTURING_SELFIE = "capturing_selfie"
    ACQUIRING_LOCATION = "acquiring_location"
    READY_TO_SUBMIT = "ready_to_submit"
    COMPLETED = "completed"
    ABANDONED = "abandoned"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in {CheckInStep.COMPLETED, CheckInStep.ABANDONED, CheckInStep.FAILED}


class IdentitySource(str, Enum):
    SCAN = "scan"
    MANUAL = "manual"


class CheckInErrorKind(str, Enum):
    """Inline error categories shown to the operator."""

    PERMISSION = "permission"
    CAPTURE = "capture"
    INVALID_ID = "invalid_id"
    SERVICE = "service"
    GEOLOCATION = "geolocation"
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


class FallbackPolicy(str, Enum):
    """What a selfie gets when the verifier cannot be reached."""

    FAIL_OPEN = "fail_open"
    PENDING_REVIEW = "pending_review"
