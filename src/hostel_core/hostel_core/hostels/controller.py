from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_session, json_body, login_required, to_json
from ..container import Container
from .service import NewHostel


def register(app: Flask, container: Container) -> None:
    @app.route("/hostels", methods=["POST"], endpoint="register_hostel")
    def register_hostel():
        body = json_body()
        location = body.get("location") or {}
        registered = container.hostel_service.register_hostel(
            NewHostel(
                admin_name=body.get("adminName", ""),
                admin_phone=body.get("adminPhone", ""),
                name=body.get("name", ""),
                address=body.get("address", ""),
                pincode=body.get("pincode", ""),
                occupancy=body.get("occupancy", ""),
                latitude=location.get("latitude", body.get("latitude")),
                longitude=location.get("longitude", body.get("longitude")),
            )
        )
        return jsonify(to_json(registered)), 201

    @app.route("/hostels/me", methods=["GET"], endpoint="my_hostel")
    @login_required
    def my_hostel():
        return jsonify(to_json(container.hostel_service.get_hostel(current_session())))
