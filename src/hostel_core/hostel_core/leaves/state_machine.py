"""Fixed three-stage leave approval pipeline."""
from __future__ import annotations

from typing import Dict, Tuple

from ..core.enums import LeaveAction, LeaveStatus, Role
from ..core.exceptions import InvalidTransitionError
from .model import LeaveProgress, LeaveRequest, ProgressStep

INITIAL_STATUS = LeaveStatus.PENDING_GUARDIAN

TRANSITIONS: Dict[Tuple[LeaveStatus, Role, LeaveAction], LeaveStatus] = {
    (LeaveStatus.PENDING_GUARDIAN, Role.GUARDIAN, LeaveAction.APPROVE): LeaveStatus.PENDING_ADMIN,
    (LeaveStatus.PENDING_GUARDIAN, Role.GUARDIAN, LeaveAction.REJECT): LeaveStatus.REJECTED,
    (LeaveStatus.PENDING_ADMIN, Role.ADMIN, LeaveAction.APPROVE): LeaveStatus.APPROVED,
    (LeaveStatus.PENDING_ADMIN, Role.ADMIN, LeaveAction.REJECT): LeaveStatus.REJECTED,
}


def next_status(current: LeaveStatus, actor: Role, action: LeaveAction) -> LeaveStatus:
    try:
        return TRANSITIONS[(LeaveStatus(current), Role(actor), LeaveAction(action))]
    except KeyError:
        if LeaveStatus(current).is_terminal:
            raise InvalidTransitionError(f"Leave is already {LeaveStatus(current).value}")
        raise InvalidTransitionError(
            f"A {Role(actor).value} cannot {LeaveAction(action).value} a leave that is {LeaveStatus(current).value}"
        )


def progress_of(leave: LeaveRequest) -> LeaveProgress:
    applied = ProgressStep("Applied", "done")
    status = leave.status
    if status == LeaveStatus.PENDING_GUARDIAN:
        steps = (applied, ProgressStep("Guardian", "current"), ProgressStep("Admin", "upcoming"))
    elif status == LeaveStatus.PENDING_ADMIN:
        steps = (applied, ProgressStep("Guardian", "done"), ProgressStep("Admin", "current"))
    elif status == LeaveStatus.APPROVED:
        steps = (applied, ProgressStep("Guardian", "done"), ProgressStep("Admin", "done"))
    elif status == LeaveStatus.REJECTED:
        # Rejected by the admin only if the guardian stage was passed.
        if leave.admin_decided_at is not None:
            steps = (applied, ProgressStep("Guardian", "done"), ProgressStep("Admin", "rejected"))
        else:
            steps = (applied, ProgressStep("Guardian", "rejected"), ProgressStep("Admin", "upcoming"))
    else:
        raise ValueError(f"Unhandled leave status: {status!r}")
    return LeaveProgress(leave_id=leave.id, status=status, steps=steps)
