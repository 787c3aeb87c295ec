from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol, Sequence

Document = dict
Listener = Callable[[List[Document]], None]

_OPS = ("==", "!=", "<", "<=", ">", ">=", "in")


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if self.op not in _OPS:
            raise ValueError(f"Unsupported filter operator: {self.op!r}")

    def matches(self, doc: Mapping) -> bool:
        if self.field not in doc:
            return False
        actual = doc[self.field]
        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        if self.op == "in":
            return actual in self.value
        if actual is None:
            return False
        if self.op == "<":
            return actual < self.value
        if self.op == "<=":
            return actual <= self.value
        if self.op == ">":
            return actual > self.value
        return actual >= self.value


@dataclass(frozen=True)
class OrderBy:
    field: str
    descending: bool = False


def where(field: str, op: str, value: Any) -> Filter:
    return Filter(field, op, value)


def matches_all(doc: Mapping, filters: Iterable[Filter]) -> bool:
    return all(f.matches(doc) for f in filters)


def sort_documents(docs: Sequence[Document], order_by: OrderBy) -> List[Document]:
    """Client-side ordering; documents missing the field sort as oldest."""
    return sorted(
        docs,
        key=lambda d: (d.get(order_by.field) is not None, d.get(order_by.field)),
        reverse=order_by.descending,
    )


class Subscription(Protocol):
    def close(self) -> None:
        raise NotImplementedError


class DocumentStore(Protocol):
    """Boundary to the persistent document store.

    Each single-document write is atomic; nothing spans documents.
    Returned documents are plain dicts carrying their key under ``id``.
    """

    def create(self, collection: str, data: Mapping, *, doc_id: Optional[str] = None) -> str:
        raise NotImplementedError

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """Raises IndexUnavailableError when ``order_by`` cannot be served."""

        raise NotImplementedError

    def update(
        self,
        collection: str,
        doc_id: str,
        patch: Mapping,
        *,
        expected: Optional[Mapping] = None,
    ) -> bool:
        """Merge ``patch`` into the document.

        When ``expected`` is given, the write only happens if every listed field
        currently has the listed value. Returns False if nothing was written.
        """

        raise NotImplementedError

    def delete(self, collection: str, doc_id: str) -> None:
        raise NotImplementedError

    def subscribe(self, collection: str, filters: Sequence[Filter], listener: Listener) -> Subscription:
        """Call ``listener`` with the matching documents now and after every change."""

        raise NotImplementedError
