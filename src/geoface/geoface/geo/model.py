from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import to_epoch_ms
from ..common.validators import require_float, require_positive


@dataclass(frozen=True)
class Coordinate:
    """A single geolocation fix."""

    latitude: float
    longitude: float
    accuracy: float
    captured_at: datetime

    def to_dict(self) -> dict:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "accuracy": self.accuracy,
            "timestamp": to_epoch_ms(self.captured_at),
        }


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeofenceConfig:
    """Allowed check-in area: origin and radius in meters."""

    origin_lat: float
    origin_lng: float
    radius_meters: float

    @property
    def origin(self) -> GeoPoint:
        return GeoPoint(latitude=self.origin_lat, longitude=self.origin_lng)

    @classmethod
    def create(cls, *, origin_lat, origin_lng, radius_meters) -> "GeofenceConfig":
        return cls(
            origin_lat=require_float(origin_lat, "School latitude"),
            origin_lng=require_float(origin_lng, "School longitude"),
            radius_meters=require_positive(radius_meters, "Radius"),
        )
