from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local, to_iso
from ..common.validators import require_non_empty
from ..core.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.session import Session
from ..notifications.notifier import Notifier
from .model import Complaint
from .repository import ComplaintRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewComplaint:
    category: str
    title: str
    description: str
    priority: str = ComplaintPriority.MEDIUM.value


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


class ComplaintService:
    def __init__(self, complaints: ComplaintRepository, notifier: Optional[Notifier] = None):
        self._complaints = complaints
        self._notifier = notifier

    def file(self, session: Session, data: NewComplaint, *, now: datetime | None = None) -> Complaint:
        resident_id = session.require_resident()
        hostel_id = session.require_tenant()
        category = _enum(ComplaintCategory, data.category, "Category")
        priority = _enum(ComplaintPriority, data.priority or ComplaintPriority.MEDIUM.value, "Priority")
        title = require_non_empty(data.title, "Title")
        description = require_non_empty(data.description, "Description")

        now = now or now_local()
        stamp = to_iso(now)
        complaint_id = self._complaints.create(
            hostel_id,
            {
                "userId": session.uid,
                "residentId": resident_id,
                "residentName": session.name,
                "category": category.value,
                "title": title,
                "description": description,
                "priority": priority.value,
                "status": ComplaintStatus.PENDING.value,
                "createdAt": stamp,
                "updatedAt": stamp,
            },
        )
        logger.info("Complaint %s filed by resident %s", complaint_id, resident_id)
        if self._notifier is not None:
            self._notifier.notify_admins(
                hostel_id,
                "New Complaint",
                f"{session.name or 'A resident'} reported: {title}",
                {"type": "complaint", "complaintId": complaint_id},
            )
        return Complaint(
            id=complaint_id,
            hostel_id=hostel_id,
            resident_id=resident_id,
            resident_name=session.name,
            category=category,
            title=title,
            description=description,
            status=ComplaintStatus.PENDING,
            priority=priority,
            created_at=now,
            updated_at=now,
            user_id=session.uid,
        )

    def list_complaints(
        self,
        session: Session,
        *,
        status: Optional[str] = None,
        resident_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[Complaint]:
        """Residents see their own complaints; admins see the hostel's, optionally narrowed."""
        hostel_id = session.require_tenant()
        status = _enum(ComplaintStatus, status, "Status") if status else None
        if session.role == Role.RESIDENT:
            resident_ids = [session.require_resident()]
        elif session.role == Role.GUARDIAN:
            resident_ids = [session.require_ward()]
        elif session.role != Role.ADMIN:
            raise ValueError(f"Unhandled role: {session.role!r}")
        return self._complaints.list(hostel_id, status=status, resident_ids=resident_ids)

    def update_status(
        self,
        session: Session,
        complaint_id: str,
        status: str,
        *,
        admin_notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> Complaint:
        session.require_role(Role.ADMIN)
        hostel_id = session.require_tenant()
        status = _enum(ComplaintStatus, status, "Status")

        now = now or now_local()
        patch = {"status": status.value, "updatedAt": to_iso(now)}
        if status == ComplaintStatus.RESOLVED:
            patch["resolvedAt"] = to_iso(now)
        if admin_notes is not None:
            patch["adminNotes"] = admin_notes

        if not self._complaints.update(hostel_id, complaint_id, patch):
            raise NotFoundError("Complaint not found")
        complaint = self._complaints.get(hostel_id, complaint_id)
        if self._notifier is not None and complaint is not None:
            self._notifier.notify_user(
                complaint.user_id or complaint.resident_id,
                "Complaint Updated",
                f"Your complaint '{complaint.title}' is now {status.value}.",
                {"type": "complaint", "complaintId": complaint_id},
            )
        return complaint
