from __future__ import annotations

from datetime import datetime
from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, Role
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(self, hostel_id: str, data: Mapping) -> str:
        raise NotImplementedError

    def get(self, hostel_id: str, leave_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def transition(
        self,
        hostel_id: str,
        leave_id: str,
        *,
        from_status: LeaveStatus,
        to_status: LeaveStatus,
        actor_role: Role,
        decided_by: str,
        decided_at: datetime,
    ) -> bool:
        """Compare-and-set on ``status``; False if the leave was no longer ``from_status``."""

        raise NotImplementedError

    def list(
        self,
        hostel_id: str,
        *,
        status: Optional[LeaveStatus] = None,
        resident_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def watch(self, hostel_id: str, resident_id: str, listener):
        raise NotImplementedError
