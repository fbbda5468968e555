from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import SelfieVerdict


class SelfieFallbackStrategy(ABC):
    """Strategy Pattern: the verdict a selfie gets when the verifier call fails."""

    @abstractmethod
    def verdict_for_failure(self, error: Exception) -> SelfieVerdict:
        raise NotImplementedError
