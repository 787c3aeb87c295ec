from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Union

from ...geofence.distance import GeoPoint
from ..model import RollCallAttempt
from .base import RollCallStrategy


class BypassStrategy(RollCallStrategy):
    """Operator override: time window and geofence skipped."""

    def check_time(self, attempt: RollCallAttempt, *, now: datetime, tz: Union[str, tzinfo, None]) -> None:
        return None

    def check_geofence(self, attempt: RollCallAttempt, *, position: GeoPoint, center: GeoPoint, radius_meters: float) -> None:
        return None
