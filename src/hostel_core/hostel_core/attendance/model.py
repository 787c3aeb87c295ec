from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..core.enums import MovementType, RejectionReason, RollCallStage
from ..geofence.distance import GeoPoint


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one successful roll-call mark. Append-only."""

    id: str
    user_id: str
    resident_id: str
    hostel_id: str
    timestamp: datetime
    latitude: float
    longitude: float
    distance: float


@dataclass(frozen=True)
class EntryExitLog:
    """Domain entity: one entry or exit movement. Append-only, alternation not enforced."""

    id: str
    user_id: str
    resident_id: str
    hostel_id: str
    type: MovementType
    timestamp: datetime


@dataclass
class RollCallAttempt:
    """Progress of a single roll-call attempt through the verification steps."""

    bypass: bool = False
    stages: List[RollCallStage] = field(default_factory=lambda: [RollCallStage.IDLE])
    position: Optional[GeoPoint] = None
    distance: Optional[float] = None
    rejection: Optional[RejectionReason] = None

    @property
    def stage(self) -> RollCallStage:
        return self.stages[-1]

    def advance(self, stage: RollCallStage) -> None:
        self.stages.append(stage)

    def reject(self, reason: RejectionReason) -> None:
        self.rejection = reason
        self.stages.append(RollCallStage.REJECTED)


@dataclass(frozen=True)
class RollCallOutcome:
    record: AttendanceRecord
    attempt: RollCallAttempt
