from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from ..core.enums import ResidentStatus, Role
from .model import Resident, User


class UserRepository(Protocol):
    """User lookups happen before a tenant is known, so this repository is not hostel-scoped."""

    def get_by_id(self, user_id: str) -> Optional[User]:
        raise NotImplementedError

    def find_by_phone(self, phone: str) -> Optional[User]:
        raise NotImplementedError

    def create(self, data: Mapping, *, user_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def copy_to(self, source_id: str, target_id: str) -> Optional[User]:
        """Write the source document's fields under ``target_id``; the source is left in place."""

        raise NotImplementedError

    def delete(self, user_id: str) -> None:
        raise NotImplementedError

    def set_push_token(self, user_id: str, token: str) -> bool:
        raise NotImplementedError

    def list_for_hostel(self, hostel_id: str, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError

    def find_guardian_of(self, hostel_id: str, resident_id: str) -> Optional[User]:
        raise NotImplementedError


class ResidentRepository(Protocol):
    def create(self, hostel_id: str, data: Mapping) -> str:
        raise NotImplementedError

    def get(self, hostel_id: str, resident_id: str) -> Optional[Resident]:
        raise NotImplementedError

    def list(self, hostel_id: str, *, status: Optional[ResidentStatus] = None) -> Sequence[Resident]:
        raise NotImplementedError

    def set_status(self, hostel_id: str, resident_id: str, status: ResidentStatus) -> bool:
        raise NotImplementedError
