from __future__ import annotations

import logging
import uuid

from flask import Flask, jsonify, session

from ..common.web import SESSION_KEY, current_session, json_body, login_required
from ..common.validators import require_non_empty
from ..container import Container
from ..core.exceptions import IdentityResolutionError

logger = logging.getLogger(__name__)

DEVICE_KEY = "device"


def _device_id() -> str:
    device = session.get(DEVICE_KEY)
    if not device:
        device = session[DEVICE_KEY] = uuid.uuid4().hex
    return device


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/otp", methods=["POST"], endpoint="auth_send_otp")
    def send_otp():
        body = json_body()
        challenge_id = container.auth_provider.verify_phone(require_non_empty(body.get("phone"), "Phone number"))
        _device_id()
        return jsonify({"challengeId": challenge_id}), 202

    @app.route("/auth/verify", methods=["POST"], endpoint="auth_verify")
    def verify():
        body = json_body()
        identity = container.auth_provider.confirm_code(
            require_non_empty(body.get("challengeId"), "Challenge"),
            require_non_empty(body.get("code"), "Verification code"),
        )

        device = _device_id()
        tracker = container.auth_trackers.for_device(device)
        if not tracker.on_auth_state_changed(identity.uid, identity.phone):
            # A newer sign-in from this device was dispatched meanwhile.
            return jsonify({"uid": identity.uid, "status": "superseded"}), 409

        state = tracker.state
        if state.error:
            raise IdentityResolutionError(state.error)
        if not state.resolved:
            # Authenticated but not registered by any hostel yet.
            session.pop(SESSION_KEY, None)
            return jsonify({"uid": identity.uid, "status": "pending_access"}), 200

        session.clear()
        session[DEVICE_KEY] = device
        session[SESSION_KEY] = state.session.to_dict()
        logger.info("Signed in uid=%s role=%s", state.session.uid, state.session.role.value)
        return jsonify(state.session.to_dict()), 200

    @app.route("/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        return jsonify(current_session().to_dict())

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        device = session.get(DEVICE_KEY)
        if device:
            container.auth_trackers.for_device(device).sign_out()
            container.auth_trackers.discard(device)
        session.clear()
        return jsonify({"status": "signed_out"})
