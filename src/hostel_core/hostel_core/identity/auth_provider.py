from __future__ import annotations

import hashlib
import logging
import secrets
import threading
from dataclasses import dataclass
from typing import Dict, Protocol

from ..common.validators import normalize_phone
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedIdentity:
    uid: str
    phone: str


class AuthProvider(Protocol):
    """Phone-OTP sign-in. The core only consumes the resulting uid."""

    def verify_phone(self, phone_number: str) -> str:
        raise NotImplementedError

    def confirm_code(self, challenge_id: str, code: str) -> AuthenticatedIdentity:
        raise NotImplementedError


class SimulatedOtpProvider(AuthProvider):
    """Development stand-in for the OTP provider: every challenge accepts one fixed code."""

    def __init__(self, *, code: str = "123456"):
        self._code = code
        self._challenges: Dict[str, str] = {}
        self._lock = threading.Lock()

    def verify_phone(self, phone_number: str) -> str:
        phone = normalize_phone(phone_number)
        challenge_id = secrets.token_hex(8)
        with self._lock:
            self._challenges[challenge_id] = phone
        logger.info("OTP sent (simulated) to %s", phone)
        return challenge_id

    def confirm_code(self, challenge_id: str, code: str) -> AuthenticatedIdentity:
        with self._lock:
            phone = self._challenges.get(challenge_id)
            if phone is None or code != self._code:
                raise AuthenticationError("Invalid verification code")
            del self._challenges[challenge_id]
        uid = hashlib.sha256(phone.encode("utf-8")).hexdigest()[:28]
        return AuthenticatedIdentity(uid=uid, phone=phone)
