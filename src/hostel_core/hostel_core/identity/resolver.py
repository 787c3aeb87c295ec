from __future__ import annotations

import logging
from typing import Optional

from ..common.validators import alternate_phone, normalize_phone, require_non_empty
from ..core.constants import DEFAULT_COUNTRY_CODE
from ..core.exceptions import IdentityResolutionError
from ..database.errors import StoreError
from ..users.model import User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


class IdentityResolver:
    """Resolve an authenticated uid to its canonical User record.

    On first login the admin-created placeholder (found by phone) is copied
    under the uid and the placeholder is deleted. A failed delete is logged
    and the migrated record is kept.
    """

    def __init__(self, users: UserRepository, *, country_code: str = DEFAULT_COUNTRY_CODE):
        self._users = users
        self._country_code = country_code

    def resolve(self, uid: str, phone: Optional[str] = None) -> Optional[User]:
        uid = require_non_empty(uid, "uid")

        try:
            user = self._users.get_by_id(uid)
            if user:
                return user
            if not phone:
                return None

            placeholder = self._find_by_phone(normalize_phone(phone))
            if not placeholder:
                logger.info("No user record for uid=%s", uid)
                return None

            migrated = self._users.copy_to(placeholder.id, uid)
        except StoreError as e:
            raise IdentityResolutionError(f"Could not resolve user {uid}") from e

        if migrated is None:
            raise IdentityResolutionError(f"Placeholder {placeholder.id} disappeared during migration")

        if placeholder.id != uid:
            try:
                self._users.delete(placeholder.id)
            except StoreError:
                logger.warning("Migrated %s -> %s but could not delete the placeholder", placeholder.id, uid, exc_info=True)

        logger.info("Migrated placeholder %s to uid=%s", placeholder.id, uid)
        return migrated

    def _find_by_phone(self, phone: str) -> Optional[User]:
        user = self._users.find_by_phone(phone)
        if user:
            return user

        alt = alternate_phone(phone, self._country_code)
        if alt and alt != phone:
            logger.debug("Retrying phone lookup with %s", alt)
            return self._users.find_by_phone(alt)
        return None
