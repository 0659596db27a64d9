"""Unit tests for auth/actions.py -- admin allow-list operations.

Covers:
- remove_user(): missing id -> AdminUserNotFound, no delete issued
- remove_user(): base admin -> BaseAdminProtected, no delete issued
- remove_user(): any other row -> exactly one delete with the same id
- add_admin_user(): normalization, blank input, duplicate address

remove_user() is tested against a MagicMock store so the assertions are on
the calls it issues, not on database side effects.
"""

from unittest.mock import MagicMock

import pytest

from auth.actions import (
    AdminUserExists,
    AdminUserNotFound,
    BaseAdminProtected,
    add_admin_user,
    list_admin_users,
    remove_user,
)
from auth.models import AdminUser


def _mock_store(row=None) -> MagicMock:
    store = MagicMock()
    store.get_admin_user.return_value = row
    return store


class TestRemoveUser:
    def test_missing_user_raises_not_found(self) -> None:
        store = _mock_store(row=None)
        with pytest.raises(AdminUserNotFound, match="not found"):
            remove_user(store, 999)
        store.get_admin_user.assert_called_once_with(999)
        store.delete_admin_user.assert_not_called()

    def test_base_admin_raises_forbidden(self) -> None:
        store = _mock_store(row=AdminUser(id=1, email="owner@example.com", is_base_admin=True))
        with pytest.raises(BaseAdminProtected, match="base admin"):
            remove_user(store, 1)
        store.delete_admin_user.assert_not_called()

    def test_regular_user_is_deleted_once(self) -> None:
        store = _mock_store(row=AdminUser(id=5, email="editor@example.com"))
        assert remove_user(store, 5) is None
        store.delete_admin_user.assert_called_once_with(5)

    def test_error_kinds_map_to_builtin_categories(self) -> None:
        """Callers outside the API can catch the standard exception families."""
        assert issubclass(AdminUserNotFound, LookupError)
        assert issubclass(BaseAdminProtected, PermissionError)


class TestAddAdminUser:
    def test_email_is_normalized(self) -> None:
        store = MagicMock()
        store.create_admin_user.return_value = 7
        store.get_admin_user.return_value = AdminUser(id=7, email="new@example.com", name="New")

        created = add_admin_user(store, "  New@Example.COM ", " New ")

        sent = store.create_admin_user.call_args.args[0]
        assert sent.email == "new@example.com"
        assert sent.name == "New"
        assert sent.is_base_admin is False
        assert created.id == 7

    def test_blank_email_rejected(self) -> None:
        store = MagicMock()
        with pytest.raises(ValueError, match="email is required"):
            add_admin_user(store, "   ")
        store.create_admin_user.assert_not_called()

    def test_duplicate_raises_exists(self) -> None:
        store = MagicMock()
        store.create_admin_user.return_value = None
        with pytest.raises(AdminUserExists):
            add_admin_user(store, "dup@example.com")


def test_list_admin_users_delegates_to_store() -> None:
    rows = [AdminUser(id=1, email="a@example.com", is_base_admin=True)]
    store = MagicMock()
    store.list_admin_users.return_value = rows
    assert list_admin_users(store) == rows
