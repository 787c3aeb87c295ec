from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_session, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import ResidentStatus, Role
from ..core.exceptions import ValidationError
from .service import NewResident


def register(app: Flask, container: Container) -> None:
    @app.route("/residents", methods=["POST"], endpoint="register_resident")
    @roles_required(Role.ADMIN)
    def register_resident():
        body = json_body()
        registered = container.resident_service.register_resident(
            current_session(),
            NewResident(
                name=body.get("name", ""),
                phone=body.get("phone", ""),
                room_number=body.get("roomNumber", ""),
                guardian_name=body.get("guardianName", ""),
                guardian_phone=body.get("guardianPhone", ""),
                email=body.get("email"),
                permanent_address=body.get("permanentAddress"),
            ),
        )
        return jsonify(to_json(registered)), 201

    @app.route("/residents", methods=["GET"], endpoint="list_residents")
    @roles_required(Role.ADMIN)
    def list_residents():
        raw = request.args.get("status")
        try:
            status = ResidentStatus(raw) if raw else None
        except ValueError:
            raise ValidationError("Unknown resident status")
        rows = container.resident_service.list_residents(current_session(), status=status)
        return jsonify(to_json(rows))

    @app.route("/residents/<resident_id>", methods=["GET"], endpoint="get_resident")
    @login_required
    def get_resident(resident_id: str):
        return jsonify(to_json(container.resident_service.get_resident(current_session(), resident_id)))

    @app.route("/residents/<resident_id>/deactivate", methods=["POST"], endpoint="deactivate_resident")
    @roles_required(Role.ADMIN)
    def deactivate_resident(resident_id: str):
        container.resident_service.deactivate_resident(current_session(), resident_id)
        return jsonify({"id": resident_id, "status": ResidentStatus.INACTIVE.value})

    @app.route("/me/push-token", methods=["PUT"], endpoint="register_push_token")
    @login_required
    def register_push_token():
        container.resident_service.register_push_token(current_session(), json_body().get("token", ""))
        return jsonify({"status": "ok"})
