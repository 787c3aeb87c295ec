from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence

from ..core.constants import TENANT_FIELD
from ..core.exceptions import AuthorizationError, TenantMismatchError
from ..database.errors import IndexUnavailableError
from ..database.store import Document, DocumentStore, Filter, Listener, OrderBy, sort_documents

logger = logging.getLogger(__name__)


def _require_hostel(hostel_id: Optional[str]) -> str:
    if not hostel_id:
        raise AuthorizationError("No hostel is assigned to this account yet")
    return hostel_id


def _entity_hostel(entity) -> Optional[str]:
    if isinstance(entity, Mapping):
        return entity.get(TENANT_FIELD)
    return getattr(entity, "hostel_id", None)


def assert_same_tenant(entity, session_hostel_id: Optional[str]) -> None:
    """Raise TenantMismatchError unless ``entity`` belongs to the session's hostel."""
    hostel_id = _require_hostel(session_hostel_id)
    if _entity_hostel(entity) != hostel_id:
        raise TenantMismatchError("Record belongs to a different hostel")


class TenantPartition:
    """Hostel-scoped access to the document store.

    Every read filters on ``hostelId`` and every write stamps it from the
    session, so repositories built on top cannot reach another tenant.
    """

    def __init__(self, store: DocumentStore):
        self._store = store

    @property
    def store(self) -> DocumentStore:
        return self._store

    def _scope_filters(self, hostel_id: str, extra_filters: Sequence[Filter]) -> List[Filter]:
        for f in extra_filters:
            if f.field == TENANT_FIELD:
                raise TenantMismatchError("Tenant filter is supplied by the session")
        return [Filter(TENANT_FIELD, "==", hostel_id), *extra_filters]

    def scoped_query(
        self,
        collection: str,
        hostel_id: Optional[str],
        extra_filters: Sequence[Filter] = (),
        *,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        hostel_id = _require_hostel(hostel_id)
        filters = self._scope_filters(hostel_id, extra_filters)

        try:
            docs = self._store.query(collection, filters, order_by=order_by, limit=limit)
        except IndexUnavailableError:
            if order_by is None:
                raise
            logger.warning("Index missing for %s ordered by %s; sorting client-side", collection, order_by.field)
            docs = sort_documents(self._store.query(collection, filters), order_by)
            if limit is not None:
                docs = docs[: int(limit)]

        return [d for d in docs if d.get(TENANT_FIELD) == hostel_id]

    def scoped_get(self, collection: str, doc_id: str, hostel_id: Optional[str]) -> Optional[Document]:
        hostel_id = _require_hostel(hostel_id)
        doc = self._store.get(collection, doc_id)
        if doc is None:
            return None
        assert_same_tenant(doc, hostel_id)
        return doc

    def scoped_create(
        self,
        collection: str,
        data: Mapping,
        hostel_id: Optional[str],
        *,
        doc_id: Optional[str] = None,
    ) -> str:
        hostel_id = _require_hostel(hostel_id)
        supplied = data.get(TENANT_FIELD)
        if supplied is not None and supplied != hostel_id:
            raise TenantMismatchError("Cannot create a record for another hostel")
        return self._store.create(collection, {**data, TENANT_FIELD: hostel_id}, doc_id=doc_id)

    def scoped_update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping,
        hostel_id: Optional[str],
        *,
        expected: Optional[Mapping] = None,
    ) -> bool:
        hostel_id = _require_hostel(hostel_id)
        if TENANT_FIELD in patch and patch[TENANT_FIELD] != hostel_id:
            raise TenantMismatchError("Cannot move a record to another hostel")
        if self.scoped_get(collection, doc_id, hostel_id) is None:
            return False
        return self._store.update(collection, doc_id, patch, expected={**(expected or {}), TENANT_FIELD: hostel_id})

    def subscribe_scoped(
        self,
        collection: str,
        hostel_id: Optional[str],
        extra_filters: Sequence[Filter],
        listener: Listener,
    ):
        hostel_id = _require_hostel(hostel_id)
        filters = self._scope_filters(hostel_id, extra_filters)
        return self._store.subscribe(collection, filters, listener)
