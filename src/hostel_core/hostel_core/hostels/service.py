from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ..common.datetime_utils import to_iso
from ..common.validators import require_coordinates, require_digits, require_non_empty
from ..core.enums import Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.session import Session
from ..users.repository import UserRepository
from .model import Hostel
from .repository import HostelRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewHostel:
    admin_name: str
    admin_phone: str
    name: str
    address: str
    pincode: str
    occupancy: str | int
    latitude: str | float
    longitude: str | float


@dataclass(frozen=True)
class RegisteredHostel:
    hostel_id: str
    admin_user_id: str


class HostelService:
    """Use case: a hostel owner self-registers a hostel (tenant)."""

    def __init__(self, hostels: HostelRepository, users: UserRepository):
        self._hostels = hostels
        self._users = users

    def register_hostel(self, data: NewHostel, *, now: datetime | None = None) -> RegisteredHostel:
        admin_name = require_non_empty(data.admin_name, "Admin name")
        admin_phone = require_digits(data.admin_phone, "Admin phone number", 10)
        name = require_non_empty(data.name, "Hostel name")
        address = require_non_empty(data.address, "Hostel address")
        pincode = require_digits(data.pincode, "Pincode", 6)
        try:
            occupancy = int(str(data.occupancy).strip())
        except ValueError:
            raise ValidationError("Please enter valid occupancy number")
        if occupancy <= 0:
            raise ValidationError("Please enter valid occupancy number")
        latitude, longitude = require_coordinates(data.latitude, data.longitude)

        now = now or datetime.now()
        hostel_id = self._hostels.create(
            {
                "name": name,
                "address": address,
                "pincode": pincode,
                "location": {"latitude": latitude, "longitude": longitude},
                "occupancy": occupancy,
                "createdAt": to_iso(now),
            }
        )
        # Placeholder admin login; migrates to the authenticated uid on first sign-in.
        admin_user_id = self._users.create(
            {
                "name": admin_name,
                "phone": admin_phone,
                "role": Role.ADMIN.value,
                "hostelId": hostel_id,
                "createdAt": to_iso(now),
            }
        )
        logger.info("Registered hostel %s (%s)", hostel_id, name)
        return RegisteredHostel(hostel_id=hostel_id, admin_user_id=admin_user_id)

    def get_hostel(self, session: Session) -> Hostel:
        hostel = self._hostels.get_by_id(session.require_tenant())
        if not hostel:
            raise NotFoundError("Hostel not found")
        return hostel
