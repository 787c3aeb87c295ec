from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus


@dataclass(frozen=True)
class Complaint:
    id: str
    hostel_id: str
    resident_id: str
    resident_name: str
    category: ComplaintCategory
    title: str
    description: str
    status: ComplaintStatus
    priority: ComplaintPriority
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    admin_notes: Optional[str] = None
    user_id: Optional[str] = None
