from datetime import date, datetime

import pytest
import pytz

from src.hostel_core.hostel_core.geofence.windows import (
    EVENING_SLOT,
    MORNING_SLOT,
    TOMORROW_MORNING_LABEL,
    get_slot,
    is_within_attendance_window,
)


@pytest.mark.parametrize(
    "hour, minute, second, allowed",
    [
        (6, 59, 59, False),
        (7, 0, 0, True),
        (9, 0, 0, True),
        (9, 0, 1, False),
        (19, 59, 59, False),
        (20, 0, 0, True),
        (21, 30, 0, True),
        (21, 30, 1, False),
    ],
)
def test_slot_boundaries_are_inclusive(hour, minute, second, allowed):
    decision = is_within_attendance_window(datetime(2024, 10, 10, hour, minute, second))
    assert decision.allowed is allowed


def test_microseconds_do_not_push_past_the_end():
    assert is_within_attendance_window(datetime(2024, 10, 10, 21, 30, 0, 999999)).allowed


@pytest.mark.parametrize(
    "hour, label",
    [
        (5, MORNING_SLOT.label),
        (15, EVENING_SLOT.label),
        (23, TOMORROW_MORNING_LABEL),
    ],
)
def test_next_slot_label(hour, label):
    decision = is_within_attendance_window(datetime(2024, 10, 10, hour, 0))
    assert not decision.allowed
    assert decision.next_slot_label == label


def test_aware_time_is_converted_to_hostel_zone():
    # 14:35 UTC is 20:05 in India
    now = pytz.utc.localize(datetime(2024, 10, 10, 14, 35))
    decision = is_within_attendance_window(now, "Asia/Kolkata")
    assert decision.allowed
    assert decision.slot is EVENING_SLOT


def test_get_slot_and_bounds():
    slot = get_slot("evening")
    start, end = slot.bounds(date(2024, 10, 10), "Asia/Kolkata")
    assert start.astimezone(pytz.utc) == pytz.utc.localize(datetime(2024, 10, 10, 14, 30))
    assert end.astimezone(pytz.utc) == pytz.utc.localize(datetime(2024, 10, 10, 16, 0))

    with pytest.raises(ValueError):
        get_slot("noon")
