from __future__ import annotations

from typing import Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when an OTP challenge cannot be confirmed."""


class AuthorizationError(DomainError):
    """Raised when a session lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced document does not exist in the caller's tenant."""


class IdentityResolutionError(DomainError):
    """Lookup or migration of a user record failed; the user stays unresolved."""


class TenantMismatchError(DomainError):
    """A read or write tried to cross a hostel boundary. Never retried."""


class InvalidTransitionError(DomainError):
    """Leave action attempted from the wrong state or by the wrong actor."""


class AttendanceRejected(DomainError):
    """A roll-call or movement attempt was rejected before anything was persisted."""

    reason: RejectionReason

    def __init__(self, message: str, *, attempt=None):
        super().__init__(message)
        self.attempt = attempt


class OutsideTimeWindow(AttendanceRejected):
    reason = RejectionReason.OUTSIDE_TIME_WINDOW

    def __init__(self, next_slot_label: str, *, attempt=None):
        super().__init__(f"Attendance is closed. Next slot: {next_slot_label}", attempt=attempt)
        self.next_slot_label = next_slot_label


class OutsideGeofence(AttendanceRejected):
    reason = RejectionReason.OUTSIDE_GEOFENCE

    def __init__(self, distance: float, radius: float, *, attempt=None):
        super().__init__(
            f"You are {distance:.0f}m away from the hostel (allowed {radius:.0f}m)",
            attempt=attempt,
        )
        self.distance = distance
        self.radius = radius


class LocationUnavailable(AttendanceRejected):
    reason = RejectionReason.LOCATION_UNAVAILABLE

    def __init__(self, detail: Optional[str] = None, *, attempt=None):
        super().__init__(detail or "Location could not be captured", attempt=attempt)


class BiometricFailed(AttendanceRejected):
    reason = RejectionReason.BIOMETRIC_FAILED

    def __init__(self, *, attempt=None):
        super().__init__("Biometric verification failed", attempt=attempt)


class NotificationDeliveryFailure(DomainError):
    """Enqueue or delivery of a push notification failed. Logged, never fatal."""
