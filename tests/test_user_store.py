"""
tests/test_user_store.py -- UserStore persistence tests against in-memory SQLite.

Covers:
  - users upsert keyed by email
  - admin_users create / duplicate / lookup / delete
  - list ordering: base admin first, then insertion order
  - upsert_base_admin sets the flag without duplicating rows
"""

from __future__ import annotations

import pytest

from auth.models import AdminUser
from conftest import make_test_store


@pytest.fixture
def store(request):
    s = make_test_store(f"store_{request.node.name}")
    yield s
    s.close()


class TestUsers:
    def test_upsert_inserts_then_updates(self, store) -> None:
        uid = store.upsert_user("a@example.com", "g-1")
        assert store.upsert_user("a@example.com", "g-2") == uid
        user = store.get_user_by_email("a@example.com")
        assert user.id == uid
        assert user.google_id == "g-2"
        assert user.role == "admin"
        assert user.created_at

    def test_missing_user_is_none(self, store) -> None:
        assert store.get_user_by_id(12345) is None
        assert store.get_user_by_email("nobody@example.com") is None


class TestAdminUsers:
    def test_create_and_get(self, store) -> None:
        new_id = store.create_admin_user(AdminUser(email="e@example.com", name="E"))
        row = store.get_admin_user(new_id)
        assert row.email == "e@example.com"
        assert row.name == "E"
        assert row.is_base_admin is False

    def test_duplicate_returns_none(self, store) -> None:
        assert store.create_admin_user(AdminUser(email="dup@example.com")) is not None
        assert store.create_admin_user(AdminUser(email="dup@example.com")) is None

    def test_delete(self, store) -> None:
        new_id = store.create_admin_user(AdminUser(email="gone@example.com"))
        assert store.delete_admin_user(new_id) is True
        assert store.get_admin_user(new_id) is None
        assert store.delete_admin_user(new_id) is False

    def test_list_orders_base_admin_first(self, store) -> None:
        store.create_admin_user(AdminUser(email="first@example.com"))
        store.create_admin_user(AdminUser(email="second@example.com"))
        store.upsert_base_admin("owner@example.com")

        emails = [u.email for u in store.list_admin_users()]

        assert emails == ["owner@example.com", "first@example.com", "second@example.com"]

    def test_upsert_base_admin_is_idempotent(self, store) -> None:
        store.upsert_base_admin("owner@example.com")
        store.upsert_base_admin("owner@example.com")
        rows = store.list_admin_users()
        assert len(rows) == 1
        assert rows[0].is_base_admin is True
