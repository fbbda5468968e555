from __future__ import annotations

from ...core.constants import SELFIE_UNAVAILABLE_NOTE
from ...core.enums import VerificationStatus
from ..model import SelfieVerdict
from .base import SelfieFallbackStrategy


class FailOpenStrategy(SelfieFallbackStrategy):
    """Accept the selfie as verified."""

    def verdict_for_failure(self, error: Exception) -> SelfieVerdict:
        return SelfieVerdict(status=VerificationStatus.VERIFIED, note=SELFIE_UNAVAILABLE_NOTE)
