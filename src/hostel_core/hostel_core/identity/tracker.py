from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from ..core.exceptions import IdentityResolutionError
from ..core.session import Session
from ..users.model import User
from .resolver import IdentityResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthState:
    sequence: int
    uid: Optional[str] = None
    user: Optional[User] = None
    session: Optional[Session] = None
    error: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.session is not None


class AuthSessionTracker:
    """Applies identity resolutions for one device session in dispatch order.

    Every auth transition takes a ticket from a monotonic counter. A result is
    applied only if no newer transition was dispatched meanwhile, so a slow
    lookup can never overwrite state from a later one (last dispatched wins,
    not last completed).
    """

    def __init__(self, resolver: IdentityResolver):
        self._resolver = resolver
        self._lock = threading.Lock()
        self._dispatched = 0
        self._state = AuthState(sequence=0)

    @property
    def state(self) -> AuthState:
        with self._lock:
            return self._state

    def begin(self) -> int:
        with self._lock:
            self._dispatched += 1
            return self._dispatched

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._dispatched

    def commit(self, ticket: int, state: AuthState) -> bool:
        with self._lock:
            if ticket != self._dispatched:
                logger.debug("Discarding stale identity result #%s (latest #%s)", ticket, self._dispatched)
                return False
            self._state = state
            return True

    def on_auth_state_changed(self, uid: Optional[str], phone: Optional[str] = None) -> bool:
        """Resolve ``uid`` (None means signed out) and apply it if still current."""
        ticket = self.begin()
        if not uid:
            return self.commit(ticket, AuthState(sequence=ticket))

        try:
            user = self._resolver.resolve(uid, phone)
        except IdentityResolutionError as e:
            logger.warning("Identity resolution failed for uid=%s: %s", uid, e)
            return self.commit(ticket, AuthState(sequence=ticket, uid=uid, error=str(e)))

        session = Session.from_user(user) if user else None
        return self.commit(ticket, AuthState(sequence=ticket, uid=uid, user=user, session=session))

    def sign_out(self) -> bool:
        return self.on_auth_state_changed(None)


class AuthTrackerRegistry:
    """One AuthSessionTracker per device session, shared across its requests."""

    def __init__(self, resolver: IdentityResolver):
        self._resolver = resolver
        self._lock = threading.Lock()
        self._trackers: Dict[str, AuthSessionTracker] = {}

    def for_device(self, device_id: str) -> AuthSessionTracker:
        with self._lock:
            tracker = self._trackers.get(device_id)
            if tracker is None:
                tracker = self._trackers[device_id] = AuthSessionTracker(self._resolver)
            return tracker

    def discard(self, device_id: str) -> None:
        with self._lock:
            self._trackers.pop(device_id, None)
