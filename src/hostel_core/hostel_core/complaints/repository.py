from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import ComplaintStatus
from .model import Complaint


class ComplaintRepository(Protocol):
    def create(self, hostel_id: str, data: Mapping) -> str:
        raise NotImplementedError

    def get(self, hostel_id: str, complaint_id: str) -> Optional[Complaint]:
        raise NotImplementedError

    def update(self, hostel_id: str, complaint_id: str, patch: Mapping) -> bool:
        raise NotImplementedError

    def list(
        self,
        hostel_id: str,
        *,
        status: Optional[ComplaintStatus] = None,
        resident_ids: Optional[Sequence[str]] = None,
    ) -> Sequence[Complaint]:
        """Newest first."""
        raise NotImplementedError
