from __future__ import annotations

from typing import Optional, Protocol

from ..geofence.distance import GeoPoint


class LocationCaptureError(Exception):
    """The device could not produce a position."""


class LocationPermissionDenied(LocationCaptureError):
    pass


class LocationHardwareError(LocationCaptureError):
    pass


class LocationProvider(Protocol):
    def get_current_position(self) -> GeoPoint:
        """Raises LocationCaptureError; never returns a default position."""

        raise NotImplementedError


class BiometricVerifier(Protocol):
    def authenticate(self, prompt: str) -> bool:
        raise NotImplementedError


class ReportedLocation(LocationProvider):
    """Position reported by the client device along with the request."""

    def __init__(self, latitude=None, longitude=None, *, error: Optional[str] = None):
        self._latitude = latitude
        self._longitude = longitude
        self._error = error

    def get_current_position(self) -> GeoPoint:
        if self._error == "permission_denied":
            raise LocationPermissionDenied("Permission to access location was denied")
        if self._error:
            raise LocationHardwareError(self._error)
        if self._latitude is None or self._longitude is None:
            raise LocationHardwareError("No location reported by the device")
        try:
            return GeoPoint(float(self._latitude), float(self._longitude))
        except (TypeError, ValueError) as e:
            raise LocationHardwareError(f"Invalid location reported: {e}") from e


class ReportedBiometric(BiometricVerifier):
    """Result of the biometric prompt the client device already ran."""

    def __init__(self, verified: bool):
        self._verified = bool(verified)

    def authenticate(self, prompt: str) -> bool:
        return self._verified
