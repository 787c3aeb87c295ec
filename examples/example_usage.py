"""Example: drive the services directly (no Flask) on the in-memory store.

Registers a hostel and a resident, signs both sides in, then runs one
leave request through guardian and admin approval.
"""

import logging
from datetime import datetime

import config.testing as settings

from src.hostel_core.hostel_core.container import build_container
from src.hostel_core.hostel_core.core.enums import LeaveAction
from src.hostel_core.hostel_core.hostels.service import NewHostel
from src.hostel_core.hostel_core.users.service import NewResident


class PrintingProvider:
    def send(self, token, title, body, data=None):
        print(f"push -> {token}: {title} | {body}")

    def send_bulk(self, tokens, title, body, data=None):
        for token in tokens:
            self.send(token, title, body, data)


def sign_in(container, uid, phone):
    tracker = container.new_auth_tracker()
    tracker.on_auth_state_changed(uid, phone)
    return tracker.state.session


def main():
    logging.basicConfig(level=logging.INFO)
    container = build_container(settings=settings, notification_provider=PrintingProvider())

    hostel = container.hostel_service.register_hostel(
        NewHostel(
            admin_name="Meera",
            admin_phone="9000000001",
            name="Green Nest PG",
            address="12 Lake Road",
            pincode="560001",
            occupancy=40,
            latitude=12.9716,
            longitude=77.5946,
        )
    )
    admin = sign_in(container, "auth-admin", "+919000000001")

    resident = container.resident_service.register_resident(
        admin,
        NewResident(
            name="Arjun",
            phone="+919000000002",
            room_number="204",
            guardian_name="Ravi",
            guardian_phone="+919000000003",
        ),
    )
    me = sign_in(container, "auth-arjun", "+919000000002")
    guardian = sign_in(container, "auth-ravi", "+919000000003")
    print("hostel", hostel.hostel_id, "resident", resident.resident_id)

    leave = container.leave_service.apply(me, "Festival", "2024-10-10", "2024-10-15")
    container.leave_service.guardian_decide(guardian, leave.id, LeaveAction.APPROVE)
    container.leave_service.admin_decide(admin, leave.id, LeaveAction.APPROVE, now=datetime.now())
    print(container.leave_service.latest_progress(me))

    container.notification_worker.drain()


if __name__ == "__main__":
    main()
