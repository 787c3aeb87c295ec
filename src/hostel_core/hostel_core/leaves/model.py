from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import LeaveStatus


@dataclass(frozen=True)
class LeaveRequest:
    id: str
    user_id: str
    resident_id: str
    hostel_id: str
    reason: str
    start_date: date
    end_date: date
    status: LeaveStatus
    created_at: datetime
    resident_name: Optional[str] = None
    guardian_decided_by: Optional[str] = None
    guardian_decided_at: Optional[datetime] = None
    admin_decided_by: Optional[str] = None
    admin_decided_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProgressStep:
    label: str
    state: str  # "done" | "current" | "rejected" | "upcoming"


@dataclass(frozen=True)
class LeaveProgress:
    """Read-model for the Applied / Guardian / Admin indicator. Derived, never stored."""

    leave_id: str
    status: LeaveStatus
    steps: Tuple[ProgressStep, ProgressStep, ProgressStep]
