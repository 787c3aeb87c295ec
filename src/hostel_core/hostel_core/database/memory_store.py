from __future__ import annotations

import copy
import threading
import uuid
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import IndexUnavailableError
from .store import Document, Filter, Listener, OrderBy, matches_all, sort_documents


class _MemorySubscription:
    def __init__(self, store: "InMemoryDocumentStore", collection: str, filters: Sequence[Filter], listener: Listener):
        self._store = store
        self.collection = collection
        self.filters = tuple(filters)
        self.listener = listener
        self.closed = False

    def close(self) -> None:
        self.closed = True
        self._store._detach(self)


class InMemoryDocumentStore:
    """Thread-safe document store kept in process memory.

    Used by tests and the ``memory`` store backend. ``indexes`` optionally lists
    the composite indexes that exist, as tuples of
    ``(equality fields..., order field)``; an ordered query with no matching
    index raises IndexUnavailableError like a real document database would.
    ``None`` means every ordered query is served.
    """

    def __init__(self, *, indexes: Optional[Iterable[Tuple[str, ...]]] = None):
        self._data: Dict[str, Dict[str, Document]] = {}
        self._lock = threading.RLock()
        self._subscriptions: List[_MemorySubscription] = []
        self._indexes = None if indexes is None else {tuple(i) for i in indexes}

    def create(self, collection: str, data: Mapping, *, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        with self._lock:
            doc = copy.deepcopy(dict(data))
            doc["id"] = doc_id
            self._data.setdefault(collection, {})[doc_id] = doc
        self._notify(collection)
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        if order_by is not None:
            self._require_index(filters, order_by)
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._data.get(collection, {}).values() if matches_all(d, filters)]
        if order_by is not None:
            docs = sort_documents(docs, order_by)
        if limit is not None:
            docs = docs[: int(limit)]
        return docs

    def update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping,
        *,
        expected: Optional[Mapping] = None,
    ) -> bool:
        with self._lock:
            doc = self._data.get(collection, {}).get(doc_id)
            if doc is None:
                return False
            if expected and any(doc.get(k) != v for k, v in expected.items()):
                return False
            doc.update(copy.deepcopy(dict(patch)))
            doc["id"] = doc_id
        self._notify(collection)
        return True

    def delete(self, collection: str, doc_id: str) -> None:
        with self._lock:
            self._data.get(collection, {}).pop(doc_id, None)
        self._notify(collection)

    def subscribe(self, collection: str, filters: Sequence[Filter], listener: Listener) -> _MemorySubscription:
        sub = _MemorySubscription(self, collection, filters, listener)
        with self._lock:
            self._subscriptions.append(sub)
        listener(self.query(collection, sub.filters))
        return sub

    def _detach(self, sub: _MemorySubscription) -> None:
        with self._lock:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

    def _notify(self, collection: str) -> None:
        with self._lock:
            subs = [s for s in self._subscriptions if s.collection == collection and not s.closed]
        for sub in subs:
            sub.listener(self.query(collection, sub.filters))

    def _require_index(self, filters: Sequence[Filter], order_by: OrderBy) -> None:
        if self._indexes is None:
            return
        fields = tuple(sorted({f.field for f in filters if f.field != order_by.field}))
        if not fields:
            return
        wanted = fields + (order_by.field,)
        for index in self._indexes:
            if tuple(sorted(index[:-1])) == fields and index[-1] == order_by.field:
                return
        raise IndexUnavailableError(f"The query requires an index on {wanted}")
