from __future__ import annotations

from ...core.constants import SELFIE_PENDING_NOTE
from ...core.enums import VerificationStatus
from ..model import SelfieVerdict
from .base import SelfieFallbackStrategy


class PendingReviewStrategy(SelfieFallbackStrategy):
    """Leave the record for an administrator to approve or reject."""

    def verdict_for_failure(self, error: Exception) -> SelfieVerdict:
        return SelfieVerdict(status=VerificationStatus.PENDING, note=SELFIE_PENDING_NOTE)
