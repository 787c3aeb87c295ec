from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

import requests

from ..core.exceptions import NotificationDeliveryFailure
from .provider import NotificationProvider

logger = logging.getLogger(__name__)

EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"


class ExpoPushProvider(NotificationProvider):
    """Sends messages through Expo's push API."""

    def __init__(self, *, url: str = EXPO_PUSH_URL, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._url = url
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    @staticmethod
    def _message(token: str, title: str, body: str, data: Optional[Mapping[str, Any]]) -> dict:
        return {"to": token, "sound": "default", "title": title, "body": body, "data": dict(data or {})}

    def send(self, token: str, title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> None:
        self._post(self._message(token, title, body, data))

    def send_bulk(self, tokens: Sequence[str], title: str, body: str, data: Optional[Mapping[str, Any]] = None) -> None:
        if not tokens:
            return
        self._post([self._message(t, title, body, data) for t in tokens])

    def _post(self, payload) -> None:
        try:
            response = self._session.post(
                self._url,
                json=payload,
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate",
                    "Content-Type": "application/json",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationDeliveryFailure(f"Expo push request failed: {e}") from e

        try:
            tickets = response.json().get("data")
        except ValueError:
            return
        if isinstance(tickets, dict):
            tickets = [tickets]
        for ticket in tickets or []:
            if ticket.get("status") == "error":
                logger.warning("Expo rejected push: %s", ticket.get("message"))
