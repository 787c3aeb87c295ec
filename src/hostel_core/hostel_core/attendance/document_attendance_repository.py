from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import from_iso, to_iso
from ..core.constants import ATTENDANCE, ENTRY_EXIT_LOGS, TENANT_FIELD
from ..core.enums import MovementType
from ..database.store import OrderBy, where
from ..tenancy.partition import TenantPartition
from .model import AttendanceRecord, EntryExitLog
from .repository import AttendanceRepository

_NEWEST_FIRST = OrderBy("timestamp", descending=True)


def _to_record(r: Mapping) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        user_id=r["userId"],
        resident_id=r["residentId"],
        hostel_id=r[TENANT_FIELD],
        timestamp=from_iso(r["timestamp"]),
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        distance=float(r["distance"]),
    )


def _to_log(r: Mapping) -> EntryExitLog:
    return EntryExitLog(
        id=str(r["id"]),
        user_id=r["userId"],
        resident_id=r["residentId"],
        hostel_id=r[TENANT_FIELD],
        type=MovementType(r["type"]),
        timestamp=from_iso(r["timestamp"]),
    )


class DocumentAttendanceRepository(AttendanceRepository):
    def __init__(self, partition: TenantPartition):
        self._partition = partition

    def add_attendance(self, hostel_id: str, data: Mapping) -> str:
        return self._partition.scoped_create(ATTENDANCE, data, hostel_id)

    def list_attendance(
        self,
        hostel_id: str,
        *,
        resident_id: Optional[str] = None,
        since: Optional[datetime] = None,
        before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        extra = []
        if resident_id:
            extra.append(where("residentId", "==", resident_id))
        if since:
            extra.append(where("timestamp", ">=", to_iso(since)))
        if before:
            extra.append(where("timestamp", "<", to_iso(before)))
        rows = self._partition.scoped_query(ATTENDANCE, hostel_id, extra, order_by=_NEWEST_FIRST, limit=limit)
        return [_to_record(r) for r in rows]

    def add_movement(self, hostel_id: str, data: Mapping) -> str:
        return self._partition.scoped_create(ENTRY_EXIT_LOGS, data, hostel_id)

    def list_movements(
        self,
        hostel_id: str,
        *,
        resident_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[EntryExitLog]:
        extra = [where("residentId", "==", resident_id)] if resident_id else []
        rows = self._partition.scoped_query(ENTRY_EXIT_LOGS, hostel_id, extra, order_by=_NEWEST_FIRST, limit=limit)
        return [_to_log(r) for r in rows]
