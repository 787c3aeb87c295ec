"""Daily roll-call windows, evaluated in the hostel's local time."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from typing import Optional, Union

from ..common.datetime_utils import get_timezone, localize


@dataclass(frozen=True)
class AttendanceSlot:
    key: str
    label: str
    start: time
    end: time

    def contains(self, moment: time) -> bool:
        return self.start <= moment <= self.end

    def bounds(self, day: date, tz: Union[str, tzinfo, None]) -> tuple[datetime, datetime]:
        """Aware start/end instants of this slot on ``day`` in ``tz``."""
        return (
            localize(datetime.combine(day, self.start), tz),
            localize(datetime.combine(day, self.end), tz),
        )


MORNING_SLOT = AttendanceSlot("MORNING", "Morning (7 AM - 9 AM)", time(7, 0), time(9, 0))
EVENING_SLOT = AttendanceSlot("EVENING", "Evening (8 PM - 9:30 PM)", time(20, 0), time(21, 30))
SLOTS = (MORNING_SLOT, EVENING_SLOT)
TOMORROW_MORNING_LABEL = "Tomorrow Morning (7 AM - 9 AM)"


@dataclass(frozen=True)
class WindowDecision:
    allowed: bool
    next_slot_label: Optional[str] = None
    slot: Optional[AttendanceSlot] = None


def get_slot(key: str) -> AttendanceSlot:
    for slot in SLOTS:
        if slot.key == key.upper():
            return slot
    raise ValueError(f"Unknown attendance slot: {key!r}")


def is_within_attendance_window(now: datetime, tz: Union[str, tzinfo, None] = None) -> WindowDecision:
    """Both slot boundaries are inclusive, to the second.

    Aware ``now`` values are converted to ``tz``; naive values are taken as
    already in hostel-local time.
    """
    if tz is not None and now.tzinfo is not None:
        now = now.astimezone(get_timezone(tz))
    moment = now.time().replace(microsecond=0, tzinfo=None)

    for slot in SLOTS:
        if slot.contains(moment):
            return WindowDecision(allowed=True, slot=slot)

    if moment < MORNING_SLOT.start:
        return WindowDecision(allowed=False, next_slot_label=MORNING_SLOT.label)
    if MORNING_SLOT.end < moment < EVENING_SLOT.start:
        return WindowDecision(allowed=False, next_slot_label=EVENING_SLOT.label)
    return WindowDecision(allowed=False, next_slot_label=TOMORROW_MORNING_LABEL)
