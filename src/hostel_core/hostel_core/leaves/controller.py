from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_session, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import LeaveAction, Role
from ..core.exceptions import ValidationError


def _action(raw: str) -> LeaveAction:
    try:
        return LeaveAction(raw)
    except ValueError:
        raise ValidationError("action must be 'approve' or 'reject'")


def register(app: Flask, container: Container) -> None:
    @app.route("/leaves", methods=["POST"], endpoint="apply_leave")
    @roles_required(Role.RESIDENT)
    def apply_leave():
        body = json_body()
        leave = container.leave_service.apply(
            current_session(), body.get("reason", ""), body.get("startDate", ""), body.get("endDate", "")
        )
        return jsonify(to_json(leave)), 201

    @app.route("/leaves/me", methods=["GET"], endpoint="my_leaves")
    @roles_required(Role.RESIDENT)
    def my_leaves():
        return jsonify(to_json(container.leave_service.my_leaves(current_session())))

    @app.route("/leaves/me/progress", methods=["GET"], endpoint="leave_progress")
    @roles_required(Role.RESIDENT)
    def leave_progress():
        return jsonify(to_json(container.leave_service.latest_progress(current_session())))

    @app.route("/leaves/pending", methods=["GET"], endpoint="pending_leaves")
    @roles_required(Role.GUARDIAN, Role.ADMIN)
    def pending_leaves():
        s = current_session()
        if s.role == Role.GUARDIAN:
            rows = container.leave_service.pending_for_guardian(s)
        else:
            rows = container.leave_service.pending_for_admin(s)
        return jsonify(to_json(rows))

    @app.route("/leaves/history", methods=["GET"], endpoint="leave_history")
    @roles_required(Role.ADMIN)
    def leave_history():
        return jsonify(to_json(container.leave_service.history(current_session())))

    @app.route("/leaves/<leave_id>/<action>", methods=["POST"], endpoint="decide_leave")
    @login_required
    def decide_leave(leave_id: str, action: str):
        leave = container.leave_service.decide(current_session(), leave_id, _action(action))
        return jsonify(to_json(leave))
