from __future__ import annotations

from typing import Mapping, Optional

from ..common.datetime_utils import from_iso
from ..core.constants import HOSTELS
from ..database.store import DocumentStore
from ..geofence.distance import GeoPoint
from .model import Hostel
from .repository import HostelRepository


class DocumentHostelRepository(HostelRepository):
    def __init__(self, store: DocumentStore):
        self._store = store

    def create(self, data: Mapping) -> str:
        return self._store.create(HOSTELS, data)

    def get_by_id(self, hostel_id: str) -> Optional[Hostel]:
        r = self._store.get(HOSTELS, hostel_id)
        if not r:
            return None
        location = r.get("location")
        return Hostel(
            id=str(r["id"]),
            name=r.get("name") or "",
            address=r.get("address") or "",
            location=GeoPoint.from_dict(location) if location else None,
            occupancy=int(r.get("occupancy") or 0),
            pincode=r.get("pincode"),
            created_at=from_iso(r.get("createdAt")),
        )
