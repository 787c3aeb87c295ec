from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, to_iso
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS, DEFAULT_HISTORY_LIMIT, DEFAULT_HOSTEL_TIMEZONE
from ..core.enums import MovementType, ResidentStatus, Role, RollCallStage
from ..core.exceptions import AuthorizationError, BiometricFailed, LocationUnavailable, ValidationError
from ..core.session import Session
from ..geofence.distance import GeoPoint, distance_meters
from ..geofence.windows import get_slot
from ..hostels.repository import HostelRepository
from ..users.model import Resident
from ..users.repository import ResidentRepository
from .factory import RollCallStrategyFactory
from .model import AttendanceRecord, EntryExitLog, RollCallAttempt, RollCallOutcome
from .repository import AttendanceRepository
from .sensors import BiometricVerifier, LocationCaptureError, LocationProvider

logger = logging.getLogger(__name__)


class AttendanceService:
    """Roll-call attendance (gated) and entry/exit logging (biometric only).

    Nothing is persisted until every check of an attempt has passed; a
    rejection raises an AttendanceRejected subclass carrying the attempt.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        hostels: HostelRepository,
        residents: ResidentRepository,
        *,
        strategy_factory: RollCallStrategyFactory | None = None,
        radius_meters: float = DEFAULT_GEOFENCE_RADIUS_METERS,
        timezone: str = DEFAULT_HOSTEL_TIMEZONE,
        allow_bypass: bool = False,
    ):
        self._attendance = attendance
        self._hostels = hostels
        self._residents = residents
        self._factory = strategy_factory or RollCallStrategyFactory()
        self._radius = float(radius_meters)
        self._tz = timezone
        self._allow_bypass = bool(allow_bypass)

    def _hostel_center(self, hostel_id: str) -> GeoPoint:
        hostel = self._hostels.get_by_id(hostel_id)
        if not hostel or not hostel.location:
            raise ValidationError("Hostel location is not configured")
        return hostel.location

    @staticmethod
    def _verify_biometric(attempt: Optional[RollCallAttempt], biometric: BiometricVerifier, prompt: str) -> None:
        if not biometric.authenticate(prompt):
            if attempt is not None:
                attempt.reject(BiometricFailed.reason)
            raise BiometricFailed(attempt=attempt)
        if attempt is not None:
            attempt.advance(RollCallStage.BIOMETRIC_VERIFIED)

    def mark_roll_call(
        self,
        session: Session,
        location: LocationProvider,
        biometric: BiometricVerifier,
        *,
        bypass: bool = False,
        now: datetime | None = None,
    ) -> RollCallOutcome:
        resident_id = session.require_resident()
        hostel_id = session.require_tenant()
        if bypass and not self._allow_bypass:
            raise AuthorizationError("Attendance override is disabled")

        now = now or now_local(self._tz)
        attempt = RollCallAttempt(bypass=bypass)
        strategy = self._factory.for_attempt(bypass=bypass)

        strategy.check_time(attempt, now=now, tz=self._tz)
        center = self._hostel_center(hostel_id)

        try:
            position = location.get_current_position()
        except LocationCaptureError as e:
            attempt.reject(LocationUnavailable.reason)
            raise LocationUnavailable(str(e), attempt=attempt) from e
        attempt.position = position
        attempt.distance = distance_meters(position, center)
        attempt.advance(RollCallStage.LOCATION_CAPTURED)

        strategy.check_geofence(attempt, position=position, center=center, radius_meters=self._radius)
        self._verify_biometric(attempt, biometric, "Verify identity to mark attendance")

        timestamp = to_iso(now, self._tz)
        record_id = self._attendance.add_attendance(
            hostel_id,
            {
                "userId": session.uid,
                "residentId": resident_id,
                "timestamp": timestamp,
                "latitude": position.latitude,
                "longitude": position.longitude,
                "distance": attempt.distance,
                "bypass": bypass,
            },
        )
        attempt.advance(RollCallStage.RECORDED)
        logger.info("Roll-call recorded for resident %s (%.1fm, bypass=%s)", resident_id, attempt.distance, bypass)

        record = AttendanceRecord(
            id=record_id,
            user_id=session.uid,
            resident_id=resident_id,
            hostel_id=hostel_id,
            timestamp=now,
            latitude=position.latitude,
            longitude=position.longitude,
            distance=attempt.distance,
        )
        return RollCallOutcome(record=record, attempt=attempt)

    def log_movement(
        self,
        session: Session,
        movement_type: MovementType,
        biometric: BiometricVerifier,
        *,
        now: datetime | None = None,
    ) -> EntryExitLog:
        resident_id = session.require_resident()
        hostel_id = session.require_tenant()
        movement_type = MovementType(movement_type)

        self._verify_biometric(None, biometric, f"Verify identity to log {movement_type.value}")

        now = now or now_local(self._tz)
        log_id = self._attendance.add_movement(
            hostel_id,
            {
                "userId": session.uid,
                "residentId": resident_id,
                "type": movement_type.value,
                "timestamp": to_iso(now, self._tz),
            },
        )
        return EntryExitLog(
            id=log_id,
            user_id=session.uid,
            resident_id=resident_id,
            hostel_id=hostel_id,
            type=movement_type,
            timestamp=now,
        )

    def _resident_in_view(self, session: Session) -> str:
        if session.role == Role.RESIDENT:
            return session.require_resident()
        if session.role == Role.GUARDIAN:
            return session.require_ward()
        if session.role == Role.ADMIN:
            raise AuthorizationError("Pick a resident to view their records")
        raise ValueError(f"Unhandled role: {session.role!r}")

    def my_attendance(self, session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        resident_id = self._resident_in_view(session)
        return self._attendance.list_attendance(session.require_tenant(), resident_id=resident_id, limit=limit)

    def attendance_log(self, session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        session.require_role(Role.ADMIN)
        return self._attendance.list_attendance(session.require_tenant(), limit=limit)

    def absent_residents(self, session: Session, slot_key: str, *, day: date | None = None) -> Sequence[Resident]:
        """Active residents with no roll-call inside ``slot_key`` on ``day``."""
        session.require_role(Role.ADMIN)
        hostel_id = session.require_tenant()
        try:
            slot = get_slot(slot_key)
        except ValueError as e:
            raise ValidationError(str(e))

        day = day or now_local(self._tz).date()
        start, end = slot.bounds(day, self._tz)
        # the window admits the whole final second (sub-second part ignored)
        before = end + timedelta(seconds=1)

        residents = self._residents.list(hostel_id, status=ResidentStatus.ACTIVE)
        attended = {r.resident_id for r in self._attendance.list_attendance(hostel_id, since=start, before=before)}
        return [r for r in residents if r.id not in attended]

    def movement_history(self, session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[EntryExitLog]:
        resident_id = self._resident_in_view(session)
        return self._attendance.list_movements(session.require_tenant(), resident_id=resident_id, limit=limit)

    def movement_status(self, session: Session) -> Optional[MovementType]:
        """Type of the most recent entry/exit log, or None if nothing was logged."""
        logs = self.movement_history(session, limit=1)
        return logs[0].type if logs else None
