from dataclasses import replace

import pytest

from src.hostel_core.hostel_core.core.enums import LeaveAction, LeaveStatus
from src.hostel_core.hostel_core.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.hostel_core.hostel_core.database.errors import StoreError
from src.hostel_core.hostel_core.leaves.service import LeaveService
from src.hostel_core.hostel_core.notifications.model import PushMessage
from src.hostel_core.hostel_core.notifications.notifier import Notifier
from src.hostel_core.hostel_core.notifications.outbox import NotificationOutbox


class StaleReadRepo:
    """Reports every leave as still pending_guardian, whatever is stored."""

    def __init__(self, inner):
        self._inner = inner

    def get(self, hostel_id, leave_id):
        leave = self._inner.get(hostel_id, leave_id)
        return replace(leave, status=LeaveStatus.PENDING_GUARDIAN) if leave else None

    def transition(self, *args, **kwargs):
        return self._inner.transition(*args, **kwargs)


class ReadFailsAfterWriteRepo:
    """Store becomes unreadable once a transition has been applied."""

    def __init__(self, inner):
        self._inner = inner
        self._written = False

    def get(self, hostel_id, leave_id):
        if self._written:
            raise StoreError("connection lost")
        return self._inner.get(hostel_id, leave_id)

    def transition(self, *args, **kwargs):
        self._written = self._inner.transition(*args, **kwargs)
        return self._written


def _status(world, leave_id):
    return world.container.leaves_repo.get(world.hostel_id, leave_id).status


def test_full_lifecycle(world, push_provider):
    svc = world.container.leave_service

    leave = svc.apply(world.resident, "Festival", "2024-10-10", "2024-10-15")
    assert _status(world, leave.id) == LeaveStatus.PENDING_GUARDIAN

    svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)
    assert _status(world, leave.id) == LeaveStatus.PENDING_ADMIN

    decided = svc.admin_decide(world.admin, leave.id, LeaveAction.APPROVE)
    assert decided.status == LeaveStatus.APPROVED
    assert decided.guardian_decided_by == world.guardian.uid
    assert decided.admin_decided_by == world.admin.uid

    with pytest.raises(InvalidTransitionError):
        svc.guardian_decide(world.guardian, leave.id, LeaveAction.REJECT)
    assert _status(world, leave.id) == LeaveStatus.APPROVED

    world.container.notification_worker.drain()
    assert [(tokens, title) for tokens, title, _, _ in push_provider.sent] == [
        (("tok-ravi",), "New Leave Request"),
        (("tok-admin",), "Leave Awaiting Approval"),
        (("tok-arjun",), "Leave Application Approved"),
    ]
    assert push_provider.sent[-1][2] == "Admin has approved your leave request from 2024-10-10 to 2024-10-15."
    assert push_provider.sent[-1][3]["type"] == "leave_status"


def test_guardian_reject_is_terminal_and_notifies_resident(world, push_provider):
    svc = world.container.leave_service
    leave = svc.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")

    svc.guardian_decide(world.guardian, leave.id, LeaveAction.REJECT)
    with pytest.raises(InvalidTransitionError):
        svc.admin_decide(world.admin, leave.id, LeaveAction.APPROVE)

    assert _status(world, leave.id) == LeaveStatus.REJECTED
    world.container.notification_worker.drain()
    assert push_provider.sent[-1][0] == ("tok-arjun",)


def test_admin_cannot_act_before_guardian(world):
    svc = world.container.leave_service
    leave = svc.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    with pytest.raises(InvalidTransitionError):
        svc.admin_decide(world.admin, leave.id, LeaveAction.APPROVE)
    assert _status(world, leave.id) == LeaveStatus.PENDING_GUARDIAN


def test_double_approval_is_rejected_without_rewrite(world):
    svc = world.container.leave_service
    leave = svc.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    first = svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)

    with pytest.raises(InvalidTransitionError):
        svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)
    again = world.container.leaves_repo.get(world.hostel_id, leave.id)
    assert again.status == LeaveStatus.PENDING_ADMIN
    assert again.guardian_decided_at == first.guardian_decided_at


def test_lost_race_is_detected_by_compare_and_set(world):
    c = world.container
    leave = c.leave_service.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    c.leave_service.guardian_decide(world.guardian, leave.id, LeaveAction.REJECT)

    racing = LeaveService(StaleReadRepo(c.leaves_repo), c.notifier)
    with pytest.raises(InvalidTransitionError, match="already decided"):
        racing.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)
    assert _status(world, leave.id) == LeaveStatus.REJECTED


def test_guardian_of_another_resident_cannot_decide(world, add_resident, sign_in_as):
    c = world.container
    add_resident("Kiran", "+919000000004", "+919000000005")
    other_guardian = sign_in_as("auth-kiran-parent", "+919000000005")
    leave = c.leave_service.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")

    with pytest.raises(InvalidTransitionError):
        c.leave_service.guardian_decide(other_guardian, leave.id, LeaveAction.APPROVE)
    assert c.leave_service.pending_for_guardian(other_guardian) == []


def test_notification_failure_does_not_roll_back(world):
    c = world.container
    full = NotificationOutbox(maxsize=1)
    full.enqueue(PushMessage(tokens=("x",), title="filler", body=""))
    svc = LeaveService(c.leaves_repo, Notifier(c.users_repo, full))

    leave = svc.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)

    assert _status(world, leave.id) == LeaveStatus.PENDING_ADMIN


def test_applied_decision_survives_failed_reread(world, push_provider):
    c = world.container
    leave = c.leave_service.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    svc = LeaveService(ReadFailsAfterWriteRepo(c.leaves_repo), c.notifier)

    decided = svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)

    assert decided.status == LeaveStatus.PENDING_ADMIN
    assert decided.guardian_decided_by == world.guardian.uid
    assert _status(world, leave.id) == LeaveStatus.PENDING_ADMIN
    c.notification_worker.drain()
    assert push_provider.sent[-1][1] == "Leave Awaiting Approval"


@pytest.mark.parametrize(
    "reason, start, end",
    [("", "2024-10-10", "2024-10-11"), ("Trip", "10/10/2024", "2024-10-11"), ("Trip", "2024-10-12", "2024-10-11")],
)
def test_invalid_applications(world, reason, start, end):
    with pytest.raises(ValidationError):
        world.container.leave_service.apply(world.resident, reason, start, end)


def test_only_residents_apply(world):
    with pytest.raises(AuthorizationError):
        world.container.leave_service.apply(world.guardian, "Trip", "2024-10-10", "2024-10-11")


def test_unknown_leave(world):
    with pytest.raises(NotFoundError):
        world.container.leave_service.admin_decide(world.admin, "nope", LeaveAction.APPROVE)


def test_queues_and_history(world):
    svc = world.container.leave_service
    first = svc.apply(world.resident, "One", "2024-10-10", "2024-10-11")
    second = svc.apply(world.resident, "Two", "2024-10-12", "2024-10-13")
    svc.guardian_decide(world.guardian, first.id, LeaveAction.APPROVE)

    assert [l.id for l in svc.pending_for_guardian(world.guardian)] == [second.id]
    assert [l.id for l in svc.pending_for_admin(world.admin)] == [first.id]
    assert {l.id for l in svc.history(world.admin)} == {first.id, second.id}
    assert {l.id for l in svc.my_leaves(world.resident)} == {first.id, second.id}


def test_progress_follows_latest_leave(world):
    svc = world.container.leave_service
    assert svc.latest_progress(world.resident) is None

    seen = []
    sub = svc.watch_progress(world.resident, seen.append)
    leave = svc.apply(world.resident, "Trip", "2024-11-01", "2024-11-02")
    svc.guardian_decide(world.guardian, leave.id, LeaveAction.APPROVE)
    sub.close()

    assert seen[0] is None
    assert [s.state for s in seen[-1].steps] == ["done", "done", "current"]
    assert svc.latest_progress(world.resident).status == LeaveStatus.PENDING_ADMIN
