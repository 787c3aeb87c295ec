import logging

import pytest

from src.hostel_core.hostel_core.core.exceptions import IdentityResolutionError
from src.hostel_core.hostel_core.database.errors import StoreError
from src.hostel_core.hostel_core.database.memory_store import InMemoryDocumentStore
from src.hostel_core.hostel_core.identity.resolver import IdentityResolver
from src.hostel_core.hostel_core.users.document_user_repository import DocumentUserRepository


class UndeletableStore(InMemoryDocumentStore):
    def delete(self, collection, doc_id):
        raise StoreError("permission denied")


class BrokenStore(InMemoryDocumentStore):
    def get(self, collection, doc_id):
        raise StoreError("unavailable")


def _placeholder(store, phone):
    store.create(
        "users",
        {"name": "Asha", "phone": phone, "role": "resident", "hostelId": "h1", "residentId": "r1"},
        doc_id="placeholder-1",
    )


def test_placeholder_is_migrated_to_authenticated_uid():
    store = InMemoryDocumentStore()
    _placeholder(store, "+911234567890")
    resolver = IdentityResolver(DocumentUserRepository(store))

    user = resolver.resolve("auth-99", "+911234567890")

    assert user.id == "auth-99"
    assert user.resident_id == "r1" and user.hostel_id == "h1"
    assert store.get("users", "auth-99")["phone"] == "+911234567890"
    assert store.get("users", "placeholder-1") is None


@pytest.mark.parametrize(
    "stored, signed_in",
    [("1234567890", "+911234567890"), ("+911234567890", "1234567890")],
)
def test_phone_lookup_retries_alternate_country_form(stored, signed_in):
    store = InMemoryDocumentStore()
    _placeholder(store, stored)

    user = IdentityResolver(DocumentUserRepository(store)).resolve("auth-99", signed_in)

    assert user is not None and user.id == "auth-99"


def test_existing_uid_is_returned_without_migration():
    store = InMemoryDocumentStore()
    store.create("users", {"name": "Asha", "phone": "+911234567890", "role": "admin", "hostelId": "h1"}, doc_id="auth-99")
    _placeholder(store, "+911234567890")

    user = IdentityResolver(DocumentUserRepository(store)).resolve("auth-99", "+911234567890")

    assert user.id == "auth-99"
    assert store.get("users", "placeholder-1") is not None


def test_unknown_phone_stays_unresolved():
    resolver = IdentityResolver(DocumentUserRepository(InMemoryDocumentStore()))
    assert resolver.resolve("auth-1", "+919999999999") is None
    assert resolver.resolve("auth-1") is None


def test_failed_placeholder_delete_is_logged_not_raised(caplog):
    store = UndeletableStore()
    _placeholder(store, "+911234567890")

    with caplog.at_level(logging.WARNING):
        user = IdentityResolver(DocumentUserRepository(store)).resolve("auth-99", "+911234567890")

    assert user.id == "auth-99"
    assert store.get("users", "placeholder-1") is not None
    assert "could not delete the placeholder" in caplog.text


def test_store_failure_during_lookup_is_a_resolution_error():
    resolver = IdentityResolver(DocumentUserRepository(BrokenStore()))
    with pytest.raises(IdentityResolutionError):
        resolver.resolve("auth-1", "+911234567890")
