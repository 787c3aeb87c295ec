from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from ..core.enums import Role
from ..core.exceptions import NotificationDeliveryFailure
from ..database.errors import StoreError
from ..users.repository import UserRepository
from .model import PushMessage
from .outbox import NotificationOutbox

logger = logging.getLogger(__name__)


class Notifier:
    """Finds the push tokens of the next responsible party and enqueues a message.

    Fire-and-forget: lookup and enqueue failures are logged and reported as
    False, never raised into the triggering workflow.
    """

    def __init__(self, users: UserRepository, outbox: NotificationOutbox):
        self._users = users
        self._outbox = outbox

    def notify_user(self, user_id: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> bool:
        try:
            user = self._users.get_by_id(user_id)
        except StoreError:
            logger.warning("Could not load user %s for notification", user_id, exc_info=True)
            return False
        return self._enqueue([user.push_token] if user and user.push_token else [], title, body, data)

    def notify_guardian_of(self, hostel_id: str, resident_id: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> bool:
        try:
            guardian = self._users.find_guardian_of(hostel_id, resident_id)
        except StoreError:
            logger.warning("Could not load guardian of %s for notification", resident_id, exc_info=True)
            return False
        return self._enqueue([guardian.push_token] if guardian and guardian.push_token else [], title, body, data)

    def notify_admins(self, hostel_id: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> bool:
        try:
            admins = self._users.list_for_hostel(hostel_id, role=Role.ADMIN)
        except StoreError:
            logger.warning("Could not load admins of %s for notification", hostel_id, exc_info=True)
            return False
        return self._enqueue([a.push_token for a in admins if a.push_token], title, body, data)

    def _enqueue(self, tokens: Sequence[str], title: str, body: str, data: Optional[Dict[str, Any]]) -> bool:
        if not tokens:
            logger.debug("No push token for '%s'; skipping", title)
            return False
        try:
            self._outbox.enqueue(PushMessage(tokens=tuple(tokens), title=title, body=body, data=dict(data or {})))
        except NotificationDeliveryFailure as e:
            logger.warning("Dropped notification '%s': %s", title, e)
            return False
        return True
