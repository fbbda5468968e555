"""Great-circle distance and geofence classification."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol

from ..core.constants import EARTH_RADIUS_METERS
from .model import GeofenceConfig


class HasLatLng(Protocol):
    latitude: float
    longitude: float


@dataclass(frozen=True)
class GeofenceResult:
    distance_meters: float
    in_range: bool


def distance_meters(a: HasLatLng, b: HasLatLng) -> float:
    """Haversine distance in meters between two lat/lng points (degrees).

    NaN inputs propagate to a NaN result.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    # Rounding can leave h just outside [0, 1] near antipodes.
    if h > 1.0:
        h = 1.0
    elif h < 0.0:
        h = 0.0
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def is_in_range(distance: float, radius_meters: float) -> bool:
    # Inclusive boundary.
    return distance <= radius_meters


def evaluate_geofence(location: HasLatLng, geofence: GeofenceConfig) -> GeofenceResult:
    dist = distance_meters(location, geofence.origin)
    return GeofenceResult(distance_meters=dist, in_range=is_in_range(dist, geofence.radius_meters))
