from __future__ import annotations

import base64
import json
import logging
from typing import Any, Optional

import requests

from ..core.constants import DEFAULT_VERIFIER_TIMEOUT_SECONDS
from ..core.exceptions import VerifierResponseError, VerifierUnavailableError
from .model import ExtractedIdentity, SelfieVerdict, parse_extracted_identity, parse_selfie_verdict
from .verifier import IdentityVerifier

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"

ID_CARD_PROMPT = (
    "Extract the Student ID and Name from this ID card image. "
    "If it's not an ID card or illegible, set valid to false. Return JSON."
)
SELFIE_PROMPT = (
    "Analyze this selfie for an attendance system. Ensure: 1. It is a real human face. "
    "2. The face is clearly visible. Return a JSON with status 'verified' or 'rejected' and a short note."
)

ID_CARD_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "studentId": {"type": "STRING"},
        "name": {"type": "STRING"},
        "valid": {"type": "BOOLEAN"},
    },
    "required": ["valid"],
}
SELFIE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "status": {"type": "STRING", "enum": ["verified", "rejected"]},
        "note": {"type": "STRING"},
    },
    "required": ["status"],
}


class GeminiVerifier(IdentityVerifier):
    """Verifier backed by the Gemini ``generateContent`` REST endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-2.5-flash",
        timeout_seconds: float = DEFAULT_VERIFIER_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = float(timeout_seconds)
        self._session = session or requests.Session()

    def extract_identity(self, image: bytes) -> ExtractedIdentity:
        return parse_extracted_identity(self._generate(image, ID_CARD_PROMPT, ID_CARD_SCHEMA))

    def verify_selfie(self, image: bytes) -> SelfieVerdict:
        return parse_selfie_verdict(self._generate(image, SELFIE_PROMPT, SELFIE_SCHEMA))

    def _generate(self, image: bytes, prompt: str, schema: dict) -> Any:
        if not self._api_key:
            raise VerifierUnavailableError("Verifier API key is not configured")

        body = {
            "contents": [
                {
                    "parts": [
                        {"inline_data": {"mime_type": "image/jpeg", "data": base64.b64encode(image).decode("ascii")}},
                        {"text": prompt},
                    ]
                }
            ],
            "generationConfig": {"responseMimeType": "application/json", "responseSchema": schema},
        }
        url = f"{API_BASE}/models/{self._model}:generateContent"

        try:
            resp = self._session.post(
                url, headers={"x-goog-api-key": self._api_key}, json=body, timeout=self._timeout
            )
        except requests.RequestException as e:
            # The exception text carries the request URL; keep it out of logs.
            raise VerifierUnavailableError(f"Verifier request failed: {type(e).__name__}") from None

        if resp.status_code != 200:
            logger.warning("Gemini returned HTTP %s: %s", resp.status_code, resp.text[:300])
            raise VerifierUnavailableError(f"Verifier returned HTTP {resp.status_code}")

        try:
            text = resp.json()["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise VerifierResponseError("Verifier response has no content") from e

        try:
            return json.loads(text)
        except ValueError as e:
            raise VerifierResponseError("Verifier content is not JSON") from e
