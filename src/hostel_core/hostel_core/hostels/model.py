from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..geofence.distance import GeoPoint


@dataclass(frozen=True)
class Hostel:
    """Tenant root. Immutable after registration."""

    id: str
    name: str
    address: str
    location: Optional[GeoPoint]
    occupancy: int
    pincode: Optional[str] = None
    created_at: Optional[datetime] = None
