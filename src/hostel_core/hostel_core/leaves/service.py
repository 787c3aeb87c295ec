from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local, parse_iso_date, to_iso
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import LeaveAction, LeaveStatus, Role
from ..core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ..core.session import Session
from ..database.errors import StoreError
from ..notifications.notifier import Notifier
from .model import LeaveProgress, LeaveRequest
from .repository import LeaveRepository
from .state_machine import INITIAL_STATUS, next_status, progress_of

logger = logging.getLogger(__name__)


def _decided(leave: LeaveRequest, target: LeaveStatus, session: Session, now: datetime) -> LeaveRequest:
    if session.role == Role.GUARDIAN:
        return replace(leave, status=target, guardian_decided_by=session.uid, guardian_decided_at=now)
    return replace(leave, status=target, admin_decided_by=session.uid, admin_decided_at=now)


class LeaveService:
    """Resident -> guardian -> admin leave approval.

    Each decision is a compare-and-set on ``status``: if another decision won
    the race the call fails with InvalidTransitionError and nothing is written.
    Notifications are fire-and-forget and never undo a transition.
    """

    def __init__(self, leaves: LeaveRepository, notifier: Notifier):
        self._leaves = leaves
        self._notifier = notifier

    def apply(
        self,
        session: Session,
        reason: str,
        start_date: str,
        end_date: str,
        *,
        now: datetime | None = None,
    ) -> LeaveRequest:
        resident_id = session.require_resident()
        hostel_id = session.require_tenant()

        reason = require_non_empty(reason, "Reason")
        try:
            start = parse_iso_date(require_non_empty(start_date, "Start date"))
            end = parse_iso_date(require_non_empty(end_date, "End date"))
        except ValueError:
            raise ValidationError("Dates must be in YYYY-MM-DD format")
        if end < start:
            raise ValidationError("End date cannot be before start date")

        now = now or now_local()
        leave_id = self._leaves.create(
            hostel_id,
            {
                "userId": session.uid,
                "residentId": resident_id,
                "residentName": session.name or None,
                "reason": reason,
                "startDate": start.isoformat(),
                "endDate": end.isoformat(),
                "status": INITIAL_STATUS.value,
                "createdAt": to_iso(now),
            },
        )
        logger.info("Leave %s submitted by resident %s", leave_id, resident_id)

        self._notifier.notify_guardian_of(
            hostel_id,
            resident_id,
            "New Leave Request",
            f"{session.name or 'Your ward'} has requested leave from {start.isoformat()} to {end.isoformat()}.",
            {"type": "leave_request", "leaveId": leave_id},
        )
        return LeaveRequest(
            id=leave_id,
            user_id=session.uid,
            resident_id=resident_id,
            hostel_id=hostel_id,
            reason=reason,
            start_date=start,
            end_date=end,
            status=INITIAL_STATUS,
            created_at=now,
            resident_name=session.name or None,
        )

    def decide(self, session: Session, leave_id: str, action: LeaveAction, *, now: datetime | None = None) -> LeaveRequest:
        hostel_id = session.require_tenant()
        action = LeaveAction(action)
        leave = self._leaves.get(hostel_id, leave_id)
        if not leave:
            raise NotFoundError("Leave request not found")

        if session.role == Role.GUARDIAN and session.linked_resident_id != leave.resident_id:
            raise InvalidTransitionError("Guardian is not linked to this resident")
        if session.role == Role.RESIDENT:
            raise InvalidTransitionError("Residents cannot decide leave requests")

        target = next_status(leave.status, session.role, action)
        now = now or now_local()
        applied = self._leaves.transition(
            hostel_id,
            leave_id,
            from_status=leave.status,
            to_status=target,
            actor_role=session.role,
            decided_by=session.uid,
            decided_at=now,
        )
        if not applied:
            current = self._leaves.get(hostel_id, leave_id)
            state = current.status.value if current else "deleted"
            raise InvalidTransitionError(f"Leave was already decided (now {state})")
        logger.info("Leave %s: %s -> %s by %s %s", leave_id, leave.status.value, target.value, session.role.value, session.uid)

        try:
            updated = self._leaves.get(hostel_id, leave_id) or _decided(leave, target, session, now)
        except StoreError:
            logger.warning("Could not re-read leave %s after %s; returning local copy", leave_id, target.value, exc_info=True)
            updated = _decided(leave, target, session, now)
        self._notify_next(updated, session.role, action)
        return updated

    def guardian_decide(self, session: Session, leave_id: str, action: LeaveAction, *, now: datetime | None = None) -> LeaveRequest:
        session.require_role(Role.GUARDIAN)
        return self.decide(session, leave_id, action, now=now)

    def admin_decide(self, session: Session, leave_id: str, action: LeaveAction, *, now: datetime | None = None) -> LeaveRequest:
        session.require_role(Role.ADMIN)
        return self.decide(session, leave_id, action, now=now)

    def _notify_next(self, leave: LeaveRequest, actor: Role, action: LeaveAction) -> None:
        period = f"from {leave.start_date.isoformat()} to {leave.end_date.isoformat()}"
        if leave.status == LeaveStatus.PENDING_ADMIN:
            self._notifier.notify_admins(
                leave.hostel_id,
                "Leave Awaiting Approval",
                f"Guardian approved leave for {leave.resident_name or 'a resident'} {period}.",
                {"type": "leave_request", "leaveId": leave.id},
            )
        elif actor == Role.ADMIN:
            self._notifier.notify_user(
                leave.user_id,
                f"Leave Application {'Approved' if action == LeaveAction.APPROVE else 'Rejected'}",
                f"Admin has {action.value}d your leave request {period}.",
                {"type": "leave_status", "leaveId": leave.id},
            )
        else:
            self._notifier.notify_user(
                leave.user_id,
                "Leave Application Rejected",
                f"Your guardian has rejected your leave request {period}.",
                {"type": "leave_status", "leaveId": leave.id},
            )

    def my_leaves(self, session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[LeaveRequest]:
        resident_id = session.require_resident()
        return self._leaves.list(session.require_tenant(), resident_id=resident_id, limit=limit)

    def pending_for_guardian(self, session: Session) -> Sequence[LeaveRequest]:
        ward = session.require_ward()
        return self._leaves.list(session.require_tenant(), resident_id=ward, status=LeaveStatus.PENDING_GUARDIAN)

    def pending_for_admin(self, session: Session) -> Sequence[LeaveRequest]:
        session.require_role(Role.ADMIN)
        return self._leaves.list(session.require_tenant(), status=LeaveStatus.PENDING_ADMIN)

    def history(self, session: Session, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[LeaveRequest]:
        session.require_role(Role.ADMIN)
        return self._leaves.list(session.require_tenant(), limit=limit)

    def latest_progress(self, session: Session) -> Optional[LeaveProgress]:
        leaves = self.my_leaves(session, limit=1)
        return progress_of(leaves[0]) if leaves else None

    def watch_progress(self, session: Session, listener: Callable[[Optional[LeaveProgress]], None]):
        """Push the latest leave's progress to ``listener`` whenever the resident's leaves change."""
        resident_id = session.require_resident()

        def _on_change(leaves: Sequence[LeaveRequest]) -> None:
            listener(progress_of(leaves[0]) if leaves else None)

        return self._leaves.watch(session.require_tenant(), resident_id, _on_change)
