"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """An identity that has completed at least one sign-in.

    google_id is the provider's stable subject for Google logins and
    "local:<email>" for identities created through the dev bypass.
    """

    email: str
    google_id: str
    role: str = "admin"
    id: int | None = None
    created_at: str | None = None


@dataclass
class AdminUser:
    """An entry on the admin allow-list.

    Only addresses on this list may sign in. The record flagged is_base_admin
    mirrors BASE_ADMIN_EMAIL and cannot be removed through the admin UI or API.
    """

    email: str
    name: str = ""
    is_base_admin: bool = False
    id: int | None = None
    created_at: str | None = None
