from __future__ import annotations

from dataclasses import dataclass

from ...core.enums import FallbackPolicy
from ...core.exceptions import ValidationError
from .base import SelfieFallbackStrategy
from .fail_open_strategy import FailOpenStrategy
from .pending_review_strategy import PendingReviewStrategy


@dataclass
class SelfieFallbackFactory:
    """Factory Pattern: choose the fallback strategy from configuration."""

    def for_policy(self, policy: FallbackPolicy | str) -> SelfieFallbackStrategy:
        try:
            policy = FallbackPolicy(policy)
        except ValueError:
            raise ValidationError(f"Unknown selfie fallback policy {policy!r}") from None

        if policy == FallbackPolicy.PENDING_REVIEW:
            return PendingReviewStrategy()
        return FailOpenStrategy()
