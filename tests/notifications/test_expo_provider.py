import logging

import pytest
import requests

from src.hostel_core.hostel_core.core.exceptions import NotificationDeliveryFailure
from src.hostel_core.hostel_core.notifications.expo_provider import EXPO_PUSH_URL, ExpoPushProvider


class FakeResponse:
    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response or FakeResponse({"data": {"status": "ok"}})
        self._error = error

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append((url, json, timeout))
        if self._error:
            raise self._error
        return self._response


def test_single_send_posts_expo_message():
    session = FakeSession()
    ExpoPushProvider(session=session, timeout=3).send("ExponentPushToken[a]", "Hi", "Body", {"type": "leave_status"})

    url, payload, timeout = session.calls[0]
    assert url == EXPO_PUSH_URL and timeout == 3
    assert payload == {
        "to": "ExponentPushToken[a]",
        "sound": "default",
        "title": "Hi",
        "body": "Body",
        "data": {"type": "leave_status"},
    }


def test_bulk_send_posts_a_list_and_skips_empty():
    session = FakeSession(FakeResponse({"data": [{"status": "ok"}, {"status": "ok"}]}))
    provider = ExpoPushProvider(session=session)
    provider.send_bulk([], "Hi", "Body")
    provider.send_bulk(["a", "b"], "Hi", "Body")

    assert len(session.calls) == 1
    assert [m["to"] for m in session.calls[0][1]] == ["a", "b"]


@pytest.mark.parametrize(
    "session",
    [FakeSession(error=requests.ConnectionError("offline")), FakeSession(FakeResponse({}, status=500))],
)
def test_transport_failures_raise_delivery_failure(session):
    with pytest.raises(NotificationDeliveryFailure):
        ExpoPushProvider(session=session).send("a", "Hi", "Body")


def test_error_tickets_are_logged(caplog):
    session = FakeSession(FakeResponse({"data": {"status": "error", "message": "DeviceNotRegistered"}}))
    with caplog.at_level(logging.WARNING):
        ExpoPushProvider(session=session).send("a", "Hi", "Body")
    assert "DeviceNotRegistered" in caplog.text
