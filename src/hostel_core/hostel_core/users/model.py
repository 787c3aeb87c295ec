from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ResidentStatus, Role


@dataclass(frozen=True)
class User:
    """Identity record. ``id`` may be re-keyed from a placeholder to an authenticated uid."""

    id: str
    name: str
    phone: str
    role: Role
    hostel_id: Optional[str]
    resident_id: Optional[str] = None
    linked_resident_id: Optional[str] = None
    push_token: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class Resident:
    id: str
    name: str
    phone: str
    room_number: str
    hostel_id: str
    guardian_name: str
    guardian_phone: str
    status: ResidentStatus
    email: Optional[str] = None
    joined_at: Optional[datetime] = None
