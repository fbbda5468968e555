from __future__ import annotations

from typing import Protocol

from .model import ExtractedIdentity, SelfieVerdict


class IdentityVerifier(Protocol):
    """External ID/selfie verification service.

    Both calls raise :class:`~geoface.core.exceptions.VerifierError` on
    transport or contract failure. A semantically negative answer is a
    normal return value (``valid=False`` / ``status=rejected``).
    """

    def extract_identity(self, image: bytes) -> ExtractedIdentity:
        raise NotImplementedError

    def verify_selfie(self, image: bytes) -> SelfieVerdict:
        raise NotImplementedError
