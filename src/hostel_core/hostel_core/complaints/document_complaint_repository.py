from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import from_iso
from ..core.constants import COMPLAINTS, TENANT_FIELD
from ..core.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus
from ..database.store import OrderBy, where
from ..tenancy.partition import TenantPartition
from .model import Complaint
from .repository import ComplaintRepository


def _to_complaint(r: Mapping) -> Complaint:
    return Complaint(
        id=str(r["id"]),
        hostel_id=r[TENANT_FIELD],
        resident_id=r["residentId"],
        resident_name=r.get("residentName") or "",
        category=ComplaintCategory(r.get("category") or ComplaintCategory.OTHER.value),
        title=r.get("title") or "",
        description=r.get("description") or "",
        status=ComplaintStatus(r["status"]),
        priority=ComplaintPriority(r.get("priority") or ComplaintPriority.MEDIUM.value),
        created_at=from_iso(r["createdAt"]),
        updated_at=from_iso(r.get("updatedAt") or r["createdAt"]),
        resolved_at=from_iso(r.get("resolvedAt")),
        admin_notes=r.get("adminNotes"),
        user_id=r.get("userId"),
    )


class DocumentComplaintRepository(ComplaintRepository):
    def __init__(self, partition: TenantPartition):
        self._partition = partition

    def create(self, hostel_id: str, data: Mapping) -> str:
        return self._partition.scoped_create(COMPLAINTS, data, hostel_id)

    def get(self, hostel_id: str, complaint_id: str) -> Optional[Complaint]:
        r = self._partition.scoped_get(COMPLAINTS, complaint_id, hostel_id)
        return _to_complaint(r) if r else None

    def update(self, hostel_id: str, complaint_id: str, patch: Mapping) -> bool:
        return self._partition.scoped_update(COMPLAINTS, complaint_id, patch, hostel_id)

    def list(
        self,
        hostel_id: str,
        *,
        status: Optional[ComplaintStatus] = None,
        resident_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[Complaint]:
        extra = []
        if status is not None:
            extra.append(where("status", "==", ComplaintStatus(status).value))
        if resident_ids:
            if len(resident_ids) == 1:
                extra.append(where("residentId", "==", resident_ids[0]))
            else:
                extra.append(where("residentId", "in", list(resident_ids)))
        rows = self._partition.scoped_query(
            COMPLAINTS, hostel_id, extra, order_by=OrderBy("createdAt", descending=True)
        )
        return [_to_complaint(r) for r in rows]
