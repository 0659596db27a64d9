"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Two token sources are checked in priority order:
  1. JWT cookie ("access_token") -- set by the web login flow.
  2. Authorization: Bearer <token> header -- scripts and API clients.

try_get_current_user() is the soft variant (returns None on failure).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.

A valid token is not enough on its own: the user row must still exist and
its e-mail must still be on the admin allow-list, so removing someone from
the list ends their session on the next request.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.tokens import COOKIE_NAME, decode_access_token


def try_get_current_user(request: Request) -> User | None:
    """Authenticate the request via cookie or Bearer header. Never raises."""
    user_store = request.app.state.user_store

    token: str | None = request.cookies.get(COOKIE_NAME)
    if not token:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            token = auth_header[7:]

    if not token:
        return None

    payload = decode_access_token(token)
    if not payload:
        return None

    user = user_store.get_user_by_id(payload["user_id"])
    if user is None:
        return None
    if user_store.get_admin_user_by_email(user.email) is None:
        return None
    return user


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return user
