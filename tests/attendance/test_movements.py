from datetime import datetime

import pytest

from src.hostel_core.hostel_core.attendance.sensors import ReportedBiometric
from src.hostel_core.hostel_core.core.enums import MovementType
from src.hostel_core.hostel_core.core.exceptions import AuthorizationError, BiometricFailed


def test_status_is_type_of_latest_log(world):
    svc = world.container.attendance_service
    assert svc.movement_status(world.guardian) is None

    svc.log_movement(world.resident, MovementType.EXIT, ReportedBiometric(True), now=datetime(2024, 10, 10, 10, 0))
    svc.log_movement(world.resident, MovementType.ENTRY, ReportedBiometric(True), now=datetime(2024, 10, 10, 18, 0))
    assert svc.movement_status(world.guardian) == MovementType.ENTRY

    # alternation is not enforced
    svc.log_movement(world.resident, MovementType.EXIT, ReportedBiometric(True), now=datetime(2024, 10, 10, 19, 0))
    svc.log_movement(world.resident, MovementType.EXIT, ReportedBiometric(True), now=datetime(2024, 10, 10, 19, 30))

    history = svc.movement_history(world.guardian)
    assert [log.type for log in history] == [MovementType.EXIT, MovementType.EXIT, MovementType.ENTRY, MovementType.EXIT]
    assert svc.movement_status(world.resident) == MovementType.EXIT


def test_movement_needs_only_biometric(world):
    svc = world.container.attendance_service
    log = svc.log_movement(world.resident, "exit", ReportedBiometric(True), now=datetime(2024, 10, 10, 3, 0))
    assert log.type == MovementType.EXIT

    with pytest.raises(BiometricFailed):
        svc.log_movement(world.resident, MovementType.ENTRY, ReportedBiometric(False))
    assert len(svc.movement_history(world.resident)) == 1


def test_admin_and_guardian_cannot_log_movements(world):
    svc = world.container.attendance_service
    with pytest.raises(AuthorizationError):
        svc.log_movement(world.guardian, MovementType.ENTRY, ReportedBiometric(True))
    with pytest.raises(AuthorizationError):
        svc.movement_history(world.admin)
