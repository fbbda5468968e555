from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..core.enums import VerificationStatus
from ..core.exceptions import VerifierResponseError


@dataclass(frozen=True)
class ExtractedIdentity:
    """Student identity from an ID-card scan or manual entry."""

    student_id: str
    student_name: str
    valid: bool

    def to_dict(self) -> dict:
        return {"student_id": self.student_id, "student_name": self.student_name, "valid": self.valid}


@dataclass(frozen=True)
class SelfieVerdict:
    status: VerificationStatus
    note: str

    def to_dict(self) -> dict:
        return {"status": self.status.value, "note": self.note}


def _require(payload: dict, key: str, kind: type) -> Any:
    if key not in payload:
        raise VerifierResponseError(f"Verifier response is missing {key!r}")
    value = payload[key]
    if not isinstance(value, kind):
        raise VerifierResponseError(f"Verifier field {key!r} has type {type(value).__name__}")
    return value


def parse_extracted_identity(payload: Any) -> ExtractedIdentity:
    """Strictly parse ``{"studentId", "name", "valid"}``.

    A payload with ``valid=false`` may omit the id/name fields.
    """
    if not isinstance(payload, dict):
        raise VerifierResponseError("Verifier response is not an object")
    valid = _require(payload, "valid", bool)
    if not valid:
        return ExtractedIdentity(
            student_id=str(payload.get("studentId") or ""),
            student_name=str(payload.get("name") or ""),
            valid=False,
        )
    student_id = _require(payload, "studentId", str).strip()
    name = _require(payload, "name", str).strip()
    # A "valid" card without readable fields cannot identify anyone.
    return ExtractedIdentity(student_id=student_id, student_name=name, valid=bool(student_id and name))


def parse_selfie_verdict(payload: Any) -> SelfieVerdict:
    if not isinstance(payload, dict):
        raise VerifierResponseError("Verifier response is not an object")
    status = _require(payload, "status", str).strip().lower()
    if status not in (VerificationStatus.VERIFIED.value, VerificationStatus.REJECTED.value):
        raise VerifierResponseError(f"Unexpected selfie status {status!r}")
    note = payload.get("note") or ""
    if not isinstance(note, str):
        raise VerifierResponseError("Verifier field 'note' is not a string")
    return SelfieVerdict(status=VerificationStatus(status), note=note)
