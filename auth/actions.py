"""
auth/actions.py -- Admin allow-list operations shared by the API, web UI, and CLI.

Each action takes the store as its first argument so callers decide which
database it runs against (app.state.user_store in requests, a fresh
UserStore in the CLI, a MagicMock in unit tests).

Errors are raised, never returned. Callers translate them:
  AdminUserNotFound  -> 404 / "not found" message
  BaseAdminProtected -> 403 / "forbidden" message
  AdminUserExists    -> 409 / "already exists" message

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.models import AdminUser
from core.models import normalize_email

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("heron.actions")


class AdminUserNotFound(LookupError):
    """No allow-list entry exists for the requested id."""


class BaseAdminProtected(PermissionError):
    """The entry is the base admin and may not be removed."""


class AdminUserExists(ValueError):
    """The e-mail address is already on the allow-list."""


def remove_user(store: UserStore, user_id: int) -> None:
    """Delete an allow-list entry unless it is missing or the base admin.

    Performs one lookup and, only when both guards pass, one delete with the
    same id. Nothing is deleted when either exception is raised.

    Raises:
        AdminUserNotFound:  no row has this id.
        BaseAdminProtected: the row is flagged is_base_admin.
    """
    row = store.get_admin_user(user_id)
    if row is None:
        logger.warning("Refused to remove admin user %d: not found", user_id)
        raise AdminUserNotFound("admin user not found")
    if row.is_base_admin:
        logger.warning("Refused to remove admin user %d: base admin", user_id)
        raise BaseAdminProtected("cannot remove base admin user")

    store.delete_admin_user(user_id)
    logger.info("Removed admin user %d (%s)", user_id, row.email)


def list_admin_users(store: UserStore) -> list[AdminUser]:
    return store.list_admin_users()


def add_admin_user(store: UserStore, email: str, name: str = "") -> AdminUser:
    """Put a new address on the allow-list and return the stored record.

    Raises:
        ValueError:      email is blank after normalization.
        AdminUserExists: the address is already listed.
    """
    normalized = normalize_email(email)
    if not normalized:
        raise ValueError("email is required")

    new_id = store.create_admin_user(AdminUser(email=normalized, name=(name or "").strip()))
    if new_id is None:
        raise AdminUserExists("admin user already exists")

    created = store.get_admin_user(new_id)
    if created is None:
        # Deleted between insert and read; surface it like any other miss.
        raise AdminUserNotFound("admin user not found")
    logger.info("Added admin user %d (%s)", new_id, normalized)
    return created
