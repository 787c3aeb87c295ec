from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Closed set of user roles; every role-dependent decision branches on it."""

    RESIDENT = "resident"
    ADMIN = "admin"
    GUARDIAN = "guardian"


class ResidentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class LeaveStatus(str, Enum):
    """Lifecycle of a leave request."""

    PENDING_GUARDIAN = "pending_guardian"
    PENDING_ADMIN = "pending_admin"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


class LeaveAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class MovementType(str, Enum):
    ENTRY = "entry"
    EXIT = "exit"


class RollCallStage(str, Enum):
    IDLE = "idle"
    LOCATION_CAPTURED = "location_captured"
    GEOFENCE_CHECKED = "geofence_checked"
    TIME_CHECKED = "time_checked"
    BIOMETRIC_VERIFIED = "biometric_verified"
    RECORDED = "recorded"
    REJECTED = "rejected"


class RejectionReason(str, Enum):
    OUTSIDE_TIME_WINDOW = "OutsideTimeWindow"
    OUTSIDE_GEOFENCE = "OutsideGeofence"
    LOCATION_UNAVAILABLE = "LocationUnavailable"
    BIOMETRIC_FAILED = "BiometricFailed"


class ComplaintStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class ComplaintCategory(str, Enum):
    MAINTENANCE = "maintenance"
    FOOD = "food"
    CLEANLINESS = "cleanliness"
    WIFI = "wifi"
    SECURITY = "security"
    OTHER = "other"


class ComplaintPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
