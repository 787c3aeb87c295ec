from __future__ import annotations

from dataclasses import dataclass

import pytest

import config.testing as testing_settings

from src.hostel_core.hostel_core.container import Container, build_container
from src.hostel_core.hostel_core.core.session import Session
from src.hostel_core.hostel_core.database.memory_store import InMemoryDocumentStore
from src.hostel_core.hostel_core.hostels.service import NewHostel
from src.hostel_core.hostel_core.users.service import NewResident

HOSTEL_LAT = 12.9716
HOSTEL_LON = 77.5946


class RecordingPushProvider:
    def __init__(self):
        self.sent = []

    def send(self, token, title, body, data=None):
        self.sent.append(((token,), title, body, dict(data or {})))

    def send_bulk(self, tokens, title, body, data=None):
        self.sent.append((tuple(tokens), title, body, dict(data or {})))


@dataclass
class HostelWorld:
    container: Container
    hostel_id: str
    resident_id: str
    admin: Session
    resident: Session
    guardian: Session


def sign_in(container: Container, uid: str, phone: str) -> Session:
    tracker = container.new_auth_tracker()
    tracker.on_auth_state_changed(uid, phone)
    return tracker.state.session


def register_resident(container: Container, admin: Session, *, name: str, phone: str, guardian_phone: str, room: str = "101"):
    return container.resident_service.register_resident(
        admin,
        NewResident(
            name=name,
            phone=phone,
            room_number=room,
            guardian_name=f"{name}'s parent",
            guardian_phone=guardian_phone,
        ),
    )


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def push_provider():
    return RecordingPushProvider()


@pytest.fixture
def container(store, push_provider):
    return build_container(settings=testing_settings, store=store, notification_provider=push_provider)


@pytest.fixture
def world(container):
    registered = container.hostel_service.register_hostel(
        NewHostel(
            admin_name="Meera",
            admin_phone="9000000001",
            name="Green Nest PG",
            address="12 Lake Road",
            pincode="560001",
            occupancy=40,
            latitude=HOSTEL_LAT,
            longitude=HOSTEL_LON,
        )
    )
    admin = sign_in(container, "auth-admin", "+919000000001")
    resident = register_resident(container, admin, name="Arjun", phone="+919000000002", guardian_phone="+919000000003")
    resident_session = sign_in(container, "auth-arjun", "+919000000002")
    guardian_session = sign_in(container, "auth-ravi", "+919000000003")

    for s, token in ((admin, "tok-admin"), (resident_session, "tok-arjun"), (guardian_session, "tok-ravi")):
        container.resident_service.register_push_token(s, token)

    return HostelWorld(
        container=container,
        hostel_id=registered.hostel_id,
        resident_id=resident.resident_id,
        admin=admin,
        resident=resident_session,
        guardian=guardian_session,
    )


@pytest.fixture
def sign_in_as(container):
    return lambda uid, phone: sign_in(container, uid, phone)


@pytest.fixture
def add_resident(container, world):
    def _add(name, phone, guardian_phone, room="101"):
        return register_resident(container, world.admin, name=name, phone=phone, guardian_phone=guardian_phone, room=room)

    return _add
