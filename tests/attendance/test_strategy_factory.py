import math
from datetime import datetime

import pytest

from src.hostel_core.hostel_core.attendance.factory import RollCallStrategyFactory
from src.hostel_core.hostel_core.attendance.model import RollCallAttempt
from src.hostel_core.hostel_core.attendance.strategies import standard_strategy
from src.hostel_core.hostel_core.attendance.strategies.bypass_strategy import BypassStrategy
from src.hostel_core.hostel_core.attendance.strategies.standard_strategy import StandardStrategy
from src.hostel_core.hostel_core.core.constants import EARTH_RADIUS_METERS
from src.hostel_core.hostel_core.core.enums import RejectionReason, RollCallStage
from src.hostel_core.hostel_core.core.exceptions import OutsideGeofence, OutsideTimeWindow
from src.hostel_core.hostel_core.geofence.distance import GeoPoint

CENTER = GeoPoint(12.9716, 77.5946)


def north_of_center(meters):
    return GeoPoint(CENTER.latitude + math.degrees(meters / EARTH_RADIUS_METERS), CENTER.longitude)


def test_factory_picks_standard_by_default():
    assert isinstance(RollCallStrategyFactory().for_attempt(bypass=False), StandardStrategy)


def test_factory_picks_bypass_when_requested():
    assert isinstance(RollCallStrategyFactory().for_attempt(bypass=True), BypassStrategy)


def test_standard_rejects_outside_window_and_records_stage():
    attempt = RollCallAttempt()
    with pytest.raises(OutsideTimeWindow):
        StandardStrategy().check_time(attempt, now=datetime(2025, 1, 1, 12, 0), tz=None)

    assert attempt.stage == RollCallStage.REJECTED
    assert attempt.rejection == RejectionReason.OUTSIDE_TIME_WINDOW


def test_standard_geofence_accepts_inside_and_rejects_outside():
    attempt = RollCallAttempt()
    StandardStrategy().check_geofence(attempt, position=north_of_center(79.9), center=CENTER, radius_meters=80.0)
    assert attempt.stage == RollCallStage.GEOFENCE_CHECKED

    with pytest.raises(OutsideGeofence) as exc:
        StandardStrategy().check_geofence(
            RollCallAttempt(), position=north_of_center(80.5), center=CENTER, radius_meters=80.0
        )
    assert exc.value.distance == pytest.approx(80.5, abs=0.01)


def test_standard_geofence_decides_through_is_within_geofence(monkeypatch):
    seen = []

    def fake_within(point, center, radius_meters):
        seen.append((point, center, radius_meters))
        return True

    monkeypatch.setattr(standard_strategy, "is_within_geofence", fake_within)
    attempt = RollCallAttempt()
    StandardStrategy().check_geofence(attempt, position=north_of_center(5000), center=CENTER, radius_meters=80.0)

    assert seen == [(north_of_center(5000), CENTER, 80.0)]
    assert attempt.stage == RollCallStage.GEOFENCE_CHECKED


def test_bypass_skips_both_checks():
    attempt = RollCallAttempt(bypass=True)
    strategy = BypassStrategy()
    strategy.check_time(attempt, now=datetime(2025, 1, 1, 3, 0), tz=None)
    strategy.check_geofence(attempt, position=north_of_center(5000), center=CENTER, radius_meters=80.0)

    assert attempt.stages == [RollCallStage.IDLE]
