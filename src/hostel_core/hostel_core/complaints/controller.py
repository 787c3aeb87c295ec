from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_session, json_body, login_required, roles_required, to_json
from ..container import Container
from ..core.enums import Role
from .service import NewComplaint


def register(app: Flask, container: Container) -> None:
    @app.route("/complaints", methods=["POST"], endpoint="file_complaint")
    @roles_required(Role.RESIDENT)
    def file_complaint():
        body = json_body()
        complaint = container.complaint_service.file(
            current_session(),
            NewComplaint(
                category=body.get("category", ""),
                title=body.get("title", ""),
                description=body.get("description", ""),
                priority=body.get("priority") or "medium",
            ),
        )
        return jsonify(to_json(complaint)), 201

    @app.route("/complaints", methods=["GET"], endpoint="list_complaints")
    @login_required
    def list_complaints():
        resident_ids = request.args.getlist("residentId") or None
        rows = container.complaint_service.list_complaints(
            current_session(), status=request.args.get("status"), resident_ids=resident_ids
        )
        return jsonify(to_json(rows))

    @app.route("/complaints/<complaint_id>/status", methods=["POST"], endpoint="update_complaint_status")
    @roles_required(Role.ADMIN)
    def update_complaint_status(complaint_id: str):
        body = json_body()
        complaint = container.complaint_service.update_status(
            current_session(), complaint_id, body.get("status", ""), admin_notes=body.get("adminNotes")
        )
        return jsonify(to_json(complaint))
