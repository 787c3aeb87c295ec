from __future__ import annotations

import json
import logging
import re
import threading
import uuid
from contextlib import contextmanager
from typing import List, Mapping, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection
from .errors import IndexUnavailableError, PermissionDeniedError, StoreError
from .mysql_base import db_cursor, fetchall, fetchone
from .store import Document, Filter, Listener, OrderBy

logger = logging.getLogger(__name__)

_FIELD = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_SORT_ERRORS = {errorcode.ER_OUT_OF_SORTMEMORY}
_ACCESS_ERRORS = {
    errorcode.ER_ACCESS_DENIED_ERROR,
    errorcode.ER_DBACCESS_DENIED_ERROR,
    errorcode.ER_TABLEACCESS_DENIED_ERROR,
    errorcode.ER_COLUMNACCESS_DENIED_ERROR,
}


def _path(field: str) -> str:
    if not _FIELD.match(field):
        raise ValueError(f"Invalid document field: {field!r}")
    return f"$.{field}"


@contextmanager
def _translate_errors():
    try:
        yield
    except mysql.connector.Error as e:
        if e.errno in _SORT_ERRORS:
            raise IndexUnavailableError(str(e)) from e
        if e.errno in _ACCESS_ERRORS:
            raise PermissionDeniedError(str(e)) from e
        raise StoreError(str(e)) from e


def _load(row: Mapping) -> Document:
    data = row["data"]
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8")
    doc = json.loads(data) if isinstance(data, str) else dict(data)
    doc["id"] = row["doc_id"]
    return doc


def _dump(data: Mapping) -> str:
    body = {k: v for k, v in data.items() if k != "id"}
    return json.dumps(body, ensure_ascii=False)


def _where(filters: Sequence[Filter]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    for f in filters:
        path = _path(f.field)
        if f.op == "in":
            clauses.append("JSON_CONTAINS(CAST(%s AS JSON), JSON_EXTRACT(data, %s))")
            params.extend([json.dumps(list(f.value)), path])
        else:
            clauses.append(f"JSON_EXTRACT(data, %s) {'=' if f.op == '==' else f.op} CAST(%s AS JSON)")
            params.extend([path, json.dumps(f.value)])
    return clauses, params


class MySQLDocumentStore:
    """Document store on a single MySQL ``documents`` table (JSON column)."""

    def __init__(self, conn_factory: DatabaseConnection, *, poll_interval: float = 2.0):
        self._conn_factory = conn_factory
        self._poll_interval = float(poll_interval)

    def create(self, collection: str, data: Mapping, *, doc_id: Optional[str] = None) -> str:
        doc_id = doc_id or uuid.uuid4().hex
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO documents(collection, doc_id, data)
                VALUES(%s, %s, CAST(%s AS JSON))
                ON DUPLICATE KEY UPDATE data=VALUES(data)
                """,
                (collection, doc_id, _dump(data)),
            )
        return doc_id

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, data FROM documents WHERE collection=%s AND doc_id=%s",
                (collection, doc_id),
            )
            r = fetchone(cur)
            return _load(r) if r else None

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        clauses, params = _where(filters)
        sql = "SELECT doc_id, data FROM documents WHERE " + " AND ".join(["collection=%s"] + clauses)
        params = [collection] + params
        if order_by is not None:
            sql += f" ORDER BY JSON_EXTRACT(data, %s) {'DESC' if order_by.descending else 'ASC'}"
            params.append(_path(order_by.field))
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_load(r) for r in fetchall(cur)]

    def update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping,
        *,
        expected: Optional[Mapping] = None,
    ) -> bool:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT doc_id, data FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                (collection, doc_id),
            )
            r = fetchone(cur)
            if not r:
                return False
            doc = _load(r)
            if expected and any(doc.get(k) != v for k, v in expected.items()):
                return False
            doc.update(patch)
            cur.execute(
                "UPDATE documents SET data=CAST(%s AS JSON) WHERE collection=%s AND doc_id=%s",
                (_dump(doc), collection, doc_id),
            )
            return cur.rowcount > 0

    def delete(self, collection: str, doc_id: str) -> None:
        with _translate_errors(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))

    def subscribe(self, collection: str, filters: Sequence[Filter], listener: Listener) -> "PollingSubscription":
        sub = PollingSubscription(self, collection, filters, listener, interval=self._poll_interval)
        sub.start()
        return sub


class PollingSubscription(threading.Thread):
    """Re-runs a query on an interval and reports result changes to the listener."""

    def __init__(self, store: MySQLDocumentStore, collection: str, filters: Sequence[Filter], listener: Listener, *, interval: float):
        super().__init__(name=f"subscription-{collection}", daemon=True)
        self._store = store
        self._collection = collection
        self._filters = tuple(filters)
        self._listener = listener
        self._interval = interval
        self._stopped = threading.Event()
        self._last: Optional[List[Document]] = None

    def run(self) -> None:
        while not self._stopped.is_set():
            try:
                docs = self._store.query(self._collection, self._filters)
            except StoreError:
                logger.warning("Polling %s failed; retrying in %.1fs", self._collection, self._interval, exc_info=True)
            else:
                if docs != self._last:
                    self._last = docs
                    self._listener(docs)
            self._stopped.wait(self._interval)

    def close(self) -> None:
        self._stopped.set()
