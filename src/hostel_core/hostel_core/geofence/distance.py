"""Great-circle distance and circular geofence checks. Pure functions."""
from __future__ import annotations

import math
from dataclasses import dataclass

from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, EARTH_RADIUS_METERS


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (-90 <= self.latitude <= 90):
            raise ValueError("Latitude must be between -90 and 90")
        if not (-180 <= self.longitude <= 180):
            raise ValueError("Longitude must be between -180 and 180")

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude}

    @classmethod
    def from_dict(cls, data: dict) -> "GeoPoint":
        return cls(float(data["latitude"]), float(data["longitude"]))


def distance_meters(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in meters between two points."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def is_within_geofence(point: GeoPoint, center: GeoPoint, radius_meters: float = DEFAULT_GEOFENCE_RADIUS_METERS) -> bool:
    return distance_meters(point, center) <= radius_meters
