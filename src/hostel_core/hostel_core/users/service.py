from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import to_iso
from ..common.validators import normalize_phone, require_non_empty
from ..core.constants import GUARDIAN_USER_PREFIX
from ..core.enums import ResidentStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.session import Session
from .model import Resident
from .repository import ResidentRepository, UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NewResident:
    name: str
    phone: str
    room_number: str
    guardian_name: str
    guardian_phone: str
    email: Optional[str] = None
    permanent_address: Optional[str] = None


@dataclass(frozen=True)
class RegisteredResident:
    resident_id: str
    resident_user_id: str
    guardian_user_id: str


class ResidentService:
    """Use case: admins register and offboard residents of their hostel."""

    def __init__(self, residents: ResidentRepository, users: UserRepository):
        self._residents = residents
        self._users = users

    def register_resident(self, session: Session, data: NewResident, *, now: datetime | None = None) -> RegisteredResident:
        """Create the Resident plus placeholder logins for the resident and the guardian.

        The resident user is keyed by the resident id and the guardian user by
        ``guardian_<residentId>``; both migrate to the authenticated uid on
        first login.
        """
        session.require_role(Role.ADMIN)
        hostel_id = session.require_tenant()

        name = require_non_empty(data.name, "Name")
        phone = normalize_phone(data.phone)
        room = require_non_empty(data.room_number, "Room number")
        guardian_name = require_non_empty(data.guardian_name, "Guardian name")
        guardian_phone = normalize_phone(data.guardian_phone)
        if phone == guardian_phone:
            raise ValidationError("Resident and guardian phone numbers must differ")

        now = now or datetime.now()
        resident_id = self._residents.create(
            hostel_id,
            {
                "name": name,
                "phone": phone,
                "email": (data.email or "").strip() or None,
                "roomNumber": room,
                "guardianName": guardian_name,
                "guardianPhone": guardian_phone,
                "permanentAddress": (data.permanent_address or "").strip() or None,
                "status": ResidentStatus.ACTIVE.value,
                "joinedAt": to_iso(now),
            },
        )

        guardian_user_id = f"{GUARDIAN_USER_PREFIX}{resident_id}"
        try:
            self._users.create(
                {
                    "name": name,
                    "phone": phone,
                    "role": Role.RESIDENT.value,
                    "hostelId": hostel_id,
                    "residentId": resident_id,
                    "createdAt": to_iso(now),
                },
                user_id=resident_id,
            )
            self._users.create(
                {
                    "name": guardian_name,
                    "phone": guardian_phone,
                    "role": Role.GUARDIAN.value,
                    "hostelId": hostel_id,
                    "linkedResidentId": resident_id,
                    "createdAt": to_iso(now),
                },
                user_id=guardian_user_id,
            )
        except Exception:
            logger.exception("Resident %s created but login records are incomplete", resident_id)
            raise

        logger.info("Registered resident %s in hostel %s", resident_id, hostel_id)
        return RegisteredResident(resident_id=resident_id, resident_user_id=resident_id, guardian_user_id=guardian_user_id)

    def list_residents(self, session: Session, *, status: Optional[ResidentStatus] = None) -> Sequence[Resident]:
        session.require_role(Role.ADMIN)
        rows = self._residents.list(session.require_tenant(), status=status)
        return sorted(rows, key=lambda r: (r.room_number, r.name))

    def get_resident(self, session: Session, resident_id: str) -> Resident:
        hostel_id = session.require_tenant()
        if session.role == Role.RESIDENT:
            if session.resident_id != resident_id:
                raise NotFoundError("Resident not found")
        elif session.role == Role.GUARDIAN:
            if session.linked_resident_id != resident_id:
                raise NotFoundError("Resident not found")
        elif session.role != Role.ADMIN:
            raise ValueError(f"Unhandled role: {session.role!r}")

        resident = self._residents.get(hostel_id, resident_id)
        if not resident:
            raise NotFoundError("Resident not found")
        return resident

    def deactivate_resident(self, session: Session, resident_id: str) -> None:
        session.require_role(Role.ADMIN)
        if not self._residents.set_status(session.require_tenant(), resident_id, ResidentStatus.INACTIVE):
            raise NotFoundError("Resident not found")

    def register_push_token(self, session: Session, token: str) -> None:
        token = require_non_empty(token, "Push token")
        if not self._users.set_push_token(session.uid, token):
            raise NotFoundError("User not found")
