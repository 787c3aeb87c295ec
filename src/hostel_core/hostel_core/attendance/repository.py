from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord, EntryExitLog


class AttendanceRepository(Protocol):
    def add_attendance(self, hostel_id: str, data: Mapping) -> str:
        raise NotImplementedError

    def list_attendance(
        self,
        hostel_id: str,
        *,
        resident_id: Optional[str] = None,
        since: Optional[datetime] = None,
        before: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Newest first."""

        raise NotImplementedError

    def add_movement(self, hostel_id: str, data: Mapping) -> str:
        raise NotImplementedError

    def list_movements(
        self,
        hostel_id: str,
        *,
        resident_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[EntryExitLog]:
        """Newest first."""

        raise NotImplementedError
