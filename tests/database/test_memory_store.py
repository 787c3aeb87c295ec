import pytest

from src.hostel_core.hostel_core.database.errors import IndexUnavailableError
from src.hostel_core.hostel_core.database.memory_store import InMemoryDocumentStore
from src.hostel_core.hostel_core.database.store import OrderBy, where


def test_create_get_query_delete():
    store = InMemoryDocumentStore()
    a = store.create("items", {"n": 1, "tag": "x"})
    store.create("items", {"n": 2, "tag": "y"}, doc_id="fixed")

    assert store.get("items", a) == {"id": a, "n": 1, "tag": "x"}
    assert [d["id"] for d in store.query("items", [where("tag", "==", "y")])] == ["fixed"]
    assert [d["n"] for d in store.query("items", order_by=OrderBy("n", descending=True))] == [2, 1]
    assert [d["n"] for d in store.query("items", [where("tag", "in", ["x", "y"])], order_by=OrderBy("n"), limit=1)] == [1]

    store.delete("items", a)
    assert store.get("items", a) is None


def test_returned_documents_are_copies():
    store = InMemoryDocumentStore()
    doc_id = store.create("items", {"tags": ["a"]})
    store.get("items", doc_id)["tags"].append("b")
    assert store.get("items", doc_id)["tags"] == ["a"]


def test_update_with_expected_is_compare_and_set():
    store = InMemoryDocumentStore()
    doc_id = store.create("leaves", {"status": "pending_guardian"})

    assert store.update("leaves", doc_id, {"status": "pending_admin"}, expected={"status": "pending_guardian"})
    assert not store.update("leaves", doc_id, {"status": "rejected"}, expected={"status": "pending_guardian"})
    assert store.get("leaves", doc_id)["status"] == "pending_admin"
    assert not store.update("leaves", "missing", {"status": "x"})


def test_subscription_receives_current_and_changed_results():
    store = InMemoryDocumentStore()
    seen = []
    sub = store.subscribe("items", [where("tag", "==", "x")], lambda docs: seen.append(len(docs)))
    store.create("items", {"tag": "x"})
    store.create("items", {"tag": "y"})
    sub.close()
    store.create("items", {"tag": "x"})

    assert seen == [0, 1, 1]


def test_ordered_query_without_index_raises():
    store = InMemoryDocumentStore(indexes=[("hostelId", "createdAt")])
    store.create("complaints", {"hostelId": "h1", "status": "pending", "createdAt": "2024-01-01"})

    assert store.query("complaints", [where("hostelId", "==", "h1")], order_by=OrderBy("createdAt"))
    with pytest.raises(IndexUnavailableError):
        store.query(
            "complaints",
            [where("hostelId", "==", "h1"), where("status", "==", "pending")],
            order_by=OrderBy("createdAt"),
        )
