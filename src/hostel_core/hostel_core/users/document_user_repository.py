from __future__ import annotations

from typing import Mapping, Optional, Sequence

from ..common.datetime_utils import from_iso
from ..core.constants import RESIDENTS, TENANT_FIELD, USERS
from ..core.enums import ResidentStatus, Role
from ..database.store import DocumentStore, Filter, where
from ..tenancy.partition import TenantPartition
from .model import Resident, User
from .repository import ResidentRepository, UserRepository


def _to_user(r: Mapping) -> User:
    return User(
        id=str(r["id"]),
        name=r.get("name") or "",
        phone=r.get("phone") or "",
        role=Role(r["role"]),
        hostel_id=r.get(TENANT_FIELD),
        resident_id=r.get("residentId"),
        linked_resident_id=r.get("linkedResidentId"),
        push_token=r.get("pushToken"),
        email=r.get("email"),
    )


def _to_resident(r: Mapping) -> Resident:
    return Resident(
        id=str(r["id"]),
        name=r.get("name") or "",
        phone=r.get("phone") or "",
        room_number=r.get("roomNumber") or "",
        hostel_id=r[TENANT_FIELD],
        guardian_name=r.get("guardianName") or "",
        guardian_phone=r.get("guardianPhone") or "",
        status=ResidentStatus(r.get("status") or ResidentStatus.ACTIVE.value),
        email=r.get("email"),
        joined_at=from_iso(r.get("joinedAt")),
    )


class DocumentUserRepository(UserRepository):
    def __init__(self, store: DocumentStore):
        self._store = store
        self._partition = TenantPartition(store)

    def get_by_id(self, user_id: str) -> Optional[User]:
        r = self._store.get(USERS, user_id)
        return _to_user(r) if r else None

    def find_by_phone(self, phone: str) -> Optional[User]:
        rows = self._store.query(USERS, [where("phone", "==", phone)], limit=1)
        return _to_user(rows[0]) if rows else None

    def create(self, data: Mapping, *, user_id: Optional[str] = None) -> str:
        return self._store.create(USERS, data, doc_id=user_id)

    def copy_to(self, source_id: str, target_id: str) -> Optional[User]:
        r = self._store.get(USERS, source_id)
        if not r:
            return None
        data = {k: v for k, v in r.items() if k != "id"}
        data["uid"] = target_id
        self._store.create(USERS, data, doc_id=target_id)
        return _to_user({**data, "id": target_id})

    def delete(self, user_id: str) -> None:
        self._store.delete(USERS, user_id)

    def set_push_token(self, user_id: str, token: str) -> bool:
        return self._store.update(USERS, user_id, {"pushToken": token})

    def list_for_hostel(self, hostel_id: str, *, role: Optional[Role] = None) -> Sequence[User]:
        extra = [Filter("role", "==", role.value)] if role else []
        return [_to_user(r) for r in self._partition.scoped_query(USERS, hostel_id, extra)]

    def find_guardian_of(self, hostel_id: str, resident_id: str) -> Optional[User]:
        rows = self._partition.scoped_query(
            USERS,
            hostel_id,
            [where("role", "==", Role.GUARDIAN.value), where("linkedResidentId", "==", resident_id)],
            limit=1,
        )
        return _to_user(rows[0]) if rows else None


class DocumentResidentRepository(ResidentRepository):
    def __init__(self, partition: TenantPartition):
        self._partition = partition

    def create(self, hostel_id: str, data: Mapping) -> str:
        return self._partition.scoped_create(RESIDENTS, data, hostel_id)

    def get(self, hostel_id: str, resident_id: str) -> Optional[Resident]:
        r = self._partition.scoped_get(RESIDENTS, resident_id, hostel_id)
        return _to_resident(r) if r else None

    def list(self, hostel_id: str, *, status: Optional[ResidentStatus] = None) -> Sequence[Resident]:
        extra = [where("status", "==", status.value)] if status else []
        return [_to_resident(r) for r in self._partition.scoped_query(RESIDENTS, hostel_id, extra)]

    def set_status(self, hostel_id: str, resident_id: str, status: ResidentStatus) -> bool:
        return self._partition.scoped_update(RESIDENTS, resident_id, {"status": status.value}, hostel_id)
