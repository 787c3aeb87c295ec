from __future__ import annotations

from datetime import datetime
from typing import List, Mapping, Optional, Sequence

from ..common.datetime_utils import from_iso, parse_iso_date, to_iso
from ..core.constants import LEAVES, TENANT_FIELD
from ..core.enums import LeaveStatus, Role
from ..database.store import OrderBy, sort_documents, where
from ..tenancy.partition import TenantPartition
from .model import LeaveRequest
from .repository import LeaveRepository

_NEWEST_FIRST = OrderBy("createdAt", descending=True)


def _to_leave(r: Mapping) -> LeaveRequest:
    return LeaveRequest(
        id=str(r["id"]),
        user_id=r["userId"],
        resident_id=r["residentId"],
        hostel_id=r[TENANT_FIELD],
        reason=r.get("reason") or "",
        start_date=parse_iso_date(r["startDate"]),
        end_date=parse_iso_date(r["endDate"]),
        status=LeaveStatus(r["status"]),
        created_at=from_iso(r["createdAt"]),
        resident_name=r.get("residentName"),
        guardian_decided_by=r.get("guardianDecidedBy"),
        guardian_decided_at=from_iso(r.get("guardianDecidedAt")),
        admin_decided_by=r.get("adminDecidedBy"),
        admin_decided_at=from_iso(r.get("adminDecidedAt")),
    )


class DocumentLeaveRepository(LeaveRepository):
    def __init__(self, partition: TenantPartition):
        self._partition = partition

    def create(self, hostel_id: str, data: Mapping) -> str:
        return self._partition.scoped_create(LEAVES, data, hostel_id)

    def get(self, hostel_id: str, leave_id: str) -> Optional[LeaveRequest]:
        r = self._partition.scoped_get(LEAVES, leave_id, hostel_id)
        return _to_leave(r) if r else None

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
        stage = "guardian" if actor_role == Role.GUARDIAN else "admin"
        patch = {
            "status": to_status.value,
            f"{stage}DecidedBy": decided_by,
            f"{stage}DecidedAt": to_iso(decided_at),
        }
        return self._partition.scoped_update(
            LEAVES, leave_id, patch, hostel_id, expected={"status": from_status.value}
        )

    def list(
        self,
        hostel_id: str,
        *,
        status: Optional[LeaveStatus] = None,
        resident_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Sequence[LeaveRequest]:
        extra = []
        if status is not None:
            extra.append(where("status", "==", status.value))
        if resident_id:
            extra.append(where("residentId", "==", resident_id))
        rows = self._partition.scoped_query(LEAVES, hostel_id, extra, order_by=_NEWEST_FIRST, limit=limit)
        return [_to_leave(r) for r in rows]

    def watch(self, hostel_id: str, resident_id: str, listener):
        """Call ``listener`` with the resident's leaves (newest first) on every change."""

        def _on_change(rows: List[dict]) -> None:
            listener([_to_leave(r) for r in sort_documents(rows, _NEWEST_FIRST)])

        return self._partition.subscribe_scoped(LEAVES, hostel_id, [where("residentId", "==", resident_id)], _on_change)
