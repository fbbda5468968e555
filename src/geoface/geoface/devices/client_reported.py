"""Device adapters for results the browser already obtained.

The camera and GPS live in the browser; each HTTP call carries what the
browser got (or the error it hit) and these adapters replay it through the
device ports.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import from_epoch_ms, now_local
from ..common.validators import require_float
from ..core.exceptions import GeolocationError, PermissionDeniedError, ValidationError
from ..geo.model import Coordinate
from .ports import GeolocationOptions, MediaDevices, MediaStream


class _ReportedStream(MediaStream):
    def stop(self) -> None:
        # Tracks were already stopped by the browser.
        return None


@dataclass(frozen=True)
class ClientReportedMedia(MediaDevices):
    granted: bool
    error: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "ClientReportedMedia":
        payload = payload or {}
        return cls(granted=bool(payload.get("granted")), error=payload.get("error"))

    def open_stream(self, *, video: bool, audio: bool) -> MediaStream:
        if not self.granted:
            raise PermissionDeniedError(self.error or "Camera/microphone access denied")
        return _ReportedStream()


class ClientReportedGeolocator:
    """Replays one browser geolocation result.

    Fixes older than ``maximum_age`` plus the request timeout, or dated more
    than the timeout in the future, are refused.
    """

    def __init__(self, payload: Optional[dict], *, clock: Callable[[], datetime] = now_local):
        self._payload = payload or {}
        self._clock = clock

    def current_position(self, options: GeolocationOptions) -> Coordinate:
        if not self._payload:
            raise GeolocationError("Geolocation is not supported by your browser")
        if self._payload.get("error"):
            raise GeolocationError(str(self._payload["error"]))

        try:
            latitude = require_float(self._payload.get("latitude"), "Latitude")
            longitude = require_float(self._payload.get("longitude"), "Longitude")
            accuracy = require_float(self._payload.get("accuracy", 0.0), "Accuracy")
        except ValidationError as e:
            raise GeolocationError(str(e)) from e
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            raise GeolocationError("Position is out of range")

        now = self._clock()
        ts = self._payload.get("timestamp")
        try:
            captured_at = from_epoch_ms(ts) if ts is not None else now
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise GeolocationError("Invalid position timestamp") from e

        window = timedelta(seconds=options.maximum_age_seconds + options.timeout_seconds)
        if captured_at < now - window or captured_at > now + timedelta(seconds=options.timeout_seconds):
            raise GeolocationError("Position fix is stale")

        return Coordinate(latitude=latitude, longitude=longitude, accuracy=accuracy, captured_at=captured_at)
