from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Role
from .exceptions import AuthorizationError


@dataclass(frozen=True)
class Session:
    """Explicit per-login context passed into every core operation.

    Built once from the resolved User and treated as immutable until the next
    identity resolution.
    """

    uid: str
    role: Role
    hostel_id: Optional[str]
    resident_id: Optional[str] = None
    linked_resident_id: Optional[str] = None
    name: str = ""

    @classmethod
    def from_user(cls, user) -> "Session":
        return cls(
            uid=user.id,
            role=user.role,
            hostel_id=user.hostel_id,
            resident_id=user.resident_id if user.role == Role.RESIDENT else None,
            linked_resident_id=user.linked_resident_id if user.role == Role.GUARDIAN else None,
            name=user.name,
        )

    def require_tenant(self) -> str:
        if not self.hostel_id:
            raise AuthorizationError("No hostel is assigned to this account yet")
        return self.hostel_id

    def require_role(self, *roles: Role) -> None:
        if self.role not in roles:
            allowed = ", ".join(r.value for r in roles)
            raise AuthorizationError(f"This action requires role: {allowed}")

    def require_resident(self) -> str:
        self.require_role(Role.RESIDENT)
        if not self.resident_id:
            raise AuthorizationError("Account is not linked to a resident record")
        return self.resident_id

    def require_ward(self) -> str:
        self.require_role(Role.GUARDIAN)
        if not self.linked_resident_id:
            raise AuthorizationError("Guardian account is not linked to a resident")
        return self.linked_resident_id

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "role": self.role.value,
            "hostel_id": self.hostel_id,
            "resident_id": self.resident_id,
            "linked_resident_id": self.linked_resident_id,
            "name": self.name,
            "home": home_for(self.role),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        return cls(
            uid=str(data["uid"]),
            role=Role(data["role"]),
            hostel_id=data.get("hostel_id"),
            resident_id=data.get("resident_id"),
            linked_resident_id=data.get("linked_resident_id"),
            name=data.get("name") or "",
        )


def home_for(role: Role) -> str:
    """Landing view for a role."""
    if role == Role.RESIDENT:
        return "resident_dashboard"
    if role == Role.ADMIN:
        return "admin_dashboard"
    if role == Role.GUARDIAN:
        return "guardian_dashboard"
    raise ValueError(f"Unhandled role: {role!r}")
