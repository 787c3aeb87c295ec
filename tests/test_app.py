import pytest

from src.hostel_core.hostel_core.main import create_app


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


def _login(app, phone):
    client = app.test_client()
    challenge = client.post("/auth/otp", json={"phone": phone}).get_json()["challengeId"]
    resp = client.post("/auth/verify", json={"challengeId": challenge, "code": "123456"})
    assert resp.status_code == 200
    return client, resp.get_json()


def _register_hostel(app):
    resp = app.test_client().post(
        "/hostels",
        json={
            "adminName": "Meera",
            "adminPhone": "9000000001",
            "name": "Green Nest PG",
            "address": "12 Lake Road",
            "pincode": "560001",
            "occupancy": 40,
            "location": {"latitude": 12.9716, "longitude": 77.5946},
        },
    )
    assert resp.status_code == 201
    return resp.get_json()["hostelId"]


def test_leave_flow_over_http(app):
    hostel_id = _register_hostel(app)
    admin, me = _login(app, "+919000000001")
    assert me["role"] == "admin" and me["hostel_id"] == hostel_id and me["home"] == "admin_dashboard"

    resp = admin.post(
        "/residents",
        json={
            "name": "Arjun",
            "phone": "+919000000002",
            "roomNumber": "204",
            "guardianName": "Ravi",
            "guardianPhone": "+919000000003",
        },
    )
    assert resp.status_code == 201

    resident, _ = _login(app, "+919000000002")
    guardian, g = _login(app, "+919000000003")
    assert g["role"] == "guardian"

    resp = resident.post("/leaves", json={"reason": "Festival", "startDate": "2024-10-10", "endDate": "2024-10-15"})
    assert resp.status_code == 201
    leave = resp.get_json()
    assert leave["status"] == "pending_guardian"

    assert [l["id"] for l in guardian.get("/leaves/pending").get_json()] == [leave["id"]]
    assert guardian.post(f"/leaves/{leave['id']}/approve").get_json()["status"] == "pending_admin"
    assert admin.post(f"/leaves/{leave['id']}/approve").get_json()["status"] == "approved"

    resp = guardian.post(f"/leaves/{leave['id']}/reject")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "InvalidTransitionError"

    progress = resident.get("/leaves/me/progress").get_json()
    assert [s["state"] for s in progress["steps"]] == ["done", "done", "done"]


def test_access_control_and_errors(app):
    _register_hostel(app)
    admin, _ = _login(app, "+919000000001")
    admin.post(
        "/residents",
        json={"name": "Arjun", "phone": "+919000000002", "roomNumber": "1", "guardianName": "Ravi", "guardianPhone": "+919000000003"},
    )
    resident, _ = _login(app, "+919000000002")

    assert app.test_client().get("/leaves/me").status_code == 401
    assert resident.get("/leaves/history").status_code == 403
    assert admin.post("/leaves/nope/maybe").status_code == 400

    resp = resident.post("/attendance/roll-call", json={"bypass": True, "biometricVerified": True, "location": {}})
    assert resp.status_code == 422
    assert resp.get_json()["reason"] == "LocationUnavailable"

    resp = resident.post(
        "/attendance/roll-call",
        json={"bypass": True, "biometricVerified": True, "location": {"latitude": 12.9716, "longitude": 77.5946}},
    )
    assert resp.status_code == 201
    assert resp.get_json()["stages"][-1] == "recorded"
    assert len(admin.get("/attendance/log").get_json()) == 1

    resp = resident.post("/complaints", json={"category": "wifi", "title": "Down", "description": "No signal"})
    assert resp.status_code == 201
    complaint_id = resp.get_json()["id"]
    resp = admin.post(f"/complaints/{complaint_id}/status", json={"status": "resolved", "adminNotes": "Fixed"})
    assert resp.get_json()["status"] == "resolved"


def test_unregistered_phone_is_pending(app):
    client = app.test_client()
    challenge = client.post("/auth/otp", json={"phone": "+919999999999"}).get_json()["challengeId"]
    resp = client.post("/auth/verify", json={"challengeId": challenge, "code": "123456"})

    assert resp.get_json()["status"] == "pending_access"
    assert client.get("/auth/me").status_code == 401


def test_wrong_code_is_unauthorized(app):
    client = app.test_client()
    challenge = client.post("/auth/otp", json={"phone": "+919000000001"}).get_json()["challengeId"]
    resp = client.post("/auth/verify", json={"challengeId": challenge, "code": "000000"})
    assert resp.status_code == 401


def test_verify_overtaken_by_newer_sign_in_on_same_device(app, container, monkeypatch):
    from flask import session

    _register_hostel(app)
    client = app.test_client()
    challenge = client.post("/auth/otp", json={"phone": "+919000000001"}).get_json()["challengeId"]

    resolve = container.identity_resolver.resolve

    def resolve_then_newer_dispatch(uid, phone=None):
        user = resolve(uid, phone)
        container.auth_trackers.for_device(session["device"]).begin()
        return user

    monkeypatch.setattr(container.identity_resolver, "resolve", resolve_then_newer_dispatch)
    resp = client.post("/auth/verify", json={"challengeId": challenge, "code": "123456"})

    assert resp.status_code == 409
    assert resp.get_json()["status"] == "superseded"
    assert client.get("/auth/me").status_code == 401


def test_logout_drops_device_tracker(app, container):
    _register_hostel(app)
    client, _ = _login(app, "+919000000001")
    with client.session_transaction() as sess:
        device = sess["device"]
    tracker = container.auth_trackers.for_device(device)

    client.post("/auth/logout")

    assert tracker.state.session is None
    assert container.auth_trackers.for_device(device) is not tracker
