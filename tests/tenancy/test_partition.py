import logging

import pytest

from src.hostel_core.hostel_core.core.exceptions import AuthorizationError, TenantMismatchError
from src.hostel_core.hostel_core.database.memory_store import InMemoryDocumentStore
from src.hostel_core.hostel_core.database.store import OrderBy, where
from src.hostel_core.hostel_core.tenancy.partition import TenantPartition, assert_same_tenant


def _seeded(store):
    for i, hostel in enumerate(["A", "B", "A", "B", "A"]):
        store.create("complaints", {"hostelId": hostel, "status": "pending", "createdAt": f"2024-01-0{i + 1}"})
    return TenantPartition(store)


def test_scoped_query_never_returns_other_tenants():
    partition = _seeded(InMemoryDocumentStore())

    rows_a = partition.scoped_query("complaints", "A")
    rows_b = partition.scoped_query("complaints", "B", [where("status", "==", "pending")])

    assert len(rows_a) == 3 and all(r["hostelId"] == "A" for r in rows_a)
    assert len(rows_b) == 2 and all(r["hostelId"] == "B" for r in rows_b)


def test_cross_tenant_get_and_update_are_rejected():
    store = InMemoryDocumentStore()
    partition = TenantPartition(store)
    doc_id = partition.scoped_create("complaints", {"status": "pending"}, "B")

    with pytest.raises(TenantMismatchError):
        partition.scoped_get("complaints", doc_id, "A")
    with pytest.raises(TenantMismatchError):
        partition.scoped_update("complaints", doc_id, {"status": "resolved"}, "A")
    assert store.get("complaints", doc_id)["status"] == "pending"


def test_create_stamps_session_tenant_and_refuses_another():
    store = InMemoryDocumentStore()
    partition = TenantPartition(store)

    doc_id = partition.scoped_create("leaves", {"reason": "x"}, "A")
    assert store.get("leaves", doc_id)["hostelId"] == "A"

    with pytest.raises(TenantMismatchError):
        partition.scoped_create("leaves", {"reason": "x", "hostelId": "B"}, "A")


def test_caller_cannot_supply_tenant_filter():
    partition = TenantPartition(InMemoryDocumentStore())
    with pytest.raises(TenantMismatchError):
        partition.scoped_query("leaves", "A", [where("hostelId", "==", "B")])


def test_missing_tenant_is_an_authorization_error():
    partition = TenantPartition(InMemoryDocumentStore())
    with pytest.raises(AuthorizationError):
        partition.scoped_query("leaves", None)
    with pytest.raises(AuthorizationError):
        assert_same_tenant({"hostelId": "A"}, "")


def test_missing_index_falls_back_to_client_side_sort(caplog):
    partition = _seeded(InMemoryDocumentStore(indexes=[]))

    with caplog.at_level(logging.WARNING):
        rows = partition.scoped_query(
            "complaints",
            "A",
            [where("status", "==", "pending")],
            order_by=OrderBy("createdAt", descending=True),
            limit=2,
        )

    assert [r["createdAt"] for r in rows] == ["2024-01-05", "2024-01-03"]
    assert "sorting client-side" in caplog.text


def test_scoped_update_checks_expected_fields():
    store = InMemoryDocumentStore()
    partition = TenantPartition(store)
    doc_id = partition.scoped_create("leaves", {"status": "approved"}, "A")

    assert not partition.scoped_update("leaves", doc_id, {"status": "rejected"}, "A", expected={"status": "pending_admin"})
    assert store.get("leaves", doc_id)["status"] == "approved"
