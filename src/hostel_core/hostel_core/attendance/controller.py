from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_session, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import MovementType, Role
from ..core.exceptions import ValidationError
from .sensors import ReportedBiometric, ReportedLocation


def _limit() -> int:
    try:
        return max(1, min(int(request.args.get("limit", 50)), 500))
    except ValueError:
        raise ValidationError("limit must be a number")


def register(app: Flask, container: Container) -> None:
    @app.route("/attendance/roll-call", methods=["POST"], endpoint="mark_roll_call")
    @roles_required(Role.RESIDENT)
    def mark_roll_call():
        body = json_body()
        location = body.get("location") or {}
        outcome = container.attendance_service.mark_roll_call(
            current_session(),
            ReportedLocation(location.get("latitude"), location.get("longitude"), error=location.get("error")),
            ReportedBiometric(bool(body.get("biometricVerified"))),
            bypass=bool(body.get("bypass")),
        )
        payload = to_json(outcome.record)
        payload["stages"] = [s.value for s in outcome.attempt.stages]
        return jsonify(payload), 201

    @app.route("/attendance/movements", methods=["POST"], endpoint="log_movement")
    @roles_required(Role.RESIDENT)
    def log_movement():
        body = json_body()
        try:
            movement_type = MovementType(body.get("type"))
        except ValueError:
            raise ValidationError("type must be 'entry' or 'exit'")
        log = container.attendance_service.log_movement(
            current_session(), movement_type, ReportedBiometric(bool(body.get("biometricVerified")))
        )
        return jsonify(to_json(log)), 201

    @app.route("/attendance/me", methods=["GET"], endpoint="my_attendance")
    @login_required
    def my_attendance():
        return jsonify(to_json(container.attendance_service.my_attendance(current_session(), limit=_limit())))

    @app.route("/attendance/movements", methods=["GET"], endpoint="movement_history")
    @login_required
    def movement_history():
        return jsonify(to_json(container.attendance_service.movement_history(current_session(), limit=_limit())))

    @app.route("/attendance/movements/status", methods=["GET"], endpoint="movement_status")
    @roles_required(Role.GUARDIAN, Role.RESIDENT)
    def movement_status():
        status = container.attendance_service.movement_status(current_session())
        return jsonify({"status": status.value if status else None})

    @app.route("/attendance/log", methods=["GET"], endpoint="attendance_log")
    @roles_required(Role.ADMIN)
    def attendance_log():
        return jsonify(to_json(container.attendance_service.attendance_log(current_session(), limit=_limit())))

    @app.route("/attendance/absent", methods=["GET"], endpoint="absent_residents")
    @roles_required(Role.ADMIN)
    def absent_residents():
        raw_day = request.args.get("date")
        try:
            day = parse_iso_date(raw_day) if raw_day else None
        except ValueError:
            raise ValidationError("date must be in YYYY-MM-DD format")
        rows = container.attendance_service.absent_residents(
            current_session(), request.args.get("slot", "evening"), day=day
        )
        return jsonify(to_json(rows))
