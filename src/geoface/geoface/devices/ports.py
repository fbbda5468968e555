from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from ..core import constants
from ..geo.model import Coordinate


@dataclass(frozen=True)
class GeolocationOptions:
    """Options for a single position request.

    ``maximum_age_seconds=0`` means a cached fix is never acceptable.
    """

    enable_high_accuracy: bool = True
    timeout_seconds: float = constants.GEOLOCATION_TIMEOUT_SECONDS
    maximum_age_seconds: float = constants.GEOLOCATION_MAXIMUM_AGE_SECONDS

    def to_dict(self) -> dict:
        # Shape of the browser's PositionOptions.
        return {
            "enableHighAccuracy": self.enable_high_accuracy,
            "timeout": int(self.timeout_seconds * 1000),
            "maximumAge": int(self.maximum_age_seconds * 1000),
        }


class MediaStream(Protocol):
    def stop(self) -> None:
        raise NotImplementedError


class MediaDevices(Protocol):
    def open_stream(self, *, video: bool, audio: bool) -> MediaStream:
        """Raise PermissionDeniedError when access is denied or unsupported."""

        raise NotImplementedError


class Geolocator(Protocol):
    def current_position(self, options: GeolocationOptions) -> Coordinate:
        """Raise GeolocationError on denial, timeout or unavailable position."""

        raise NotImplementedError
