from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Union

from ...core.enums import RollCallStage
from ...core.exceptions import OutsideGeofence, OutsideTimeWindow
from ...geofence.distance import GeoPoint, distance_meters, is_within_geofence
from ...geofence.windows import is_within_attendance_window
from ..model import RollCallAttempt
from .base import RollCallStrategy


class StandardStrategy(RollCallStrategy):
    """Time window and geofence both enforced."""

    def check_time(self, attempt: RollCallAttempt, *, now: datetime, tz: Union[str, tzinfo, None]) -> None:
        decision = is_within_attendance_window(now, tz)
        if not decision.allowed:
            attempt.reject(OutsideTimeWindow.reason)
            raise OutsideTimeWindow(decision.next_slot_label or "", attempt=attempt)
        attempt.advance(RollCallStage.TIME_CHECKED)

    def check_geofence(self, attempt: RollCallAttempt, *, position: GeoPoint, center: GeoPoint, radius_meters: float) -> None:
        if not is_within_geofence(position, center, radius_meters):
            attempt.reject(OutsideGeofence.reason)
            raise OutsideGeofence(distance_meters(position, center), radius_meters, attempt=attempt)
        attempt.advance(RollCallStage.GEOFENCE_CHECKED)
