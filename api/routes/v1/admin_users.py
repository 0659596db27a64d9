"""
api/routes/v1/admin_users.py -- Admin allow-list REST endpoints.

Routes:
  GET    /api/v1/admin/users            -- list allow-list entries
  POST   /api/v1/admin/users            -- add an e-mail address
  DELETE /api/v1/admin/users/{user_id}  -- remove an entry (base admin refused)

All routes require an authenticated session (get_current_user). Every signed-in
identity is an admin, so no extra role check is applied.

Error mapping (auth.actions -> HTTP):
  ValueError          -> 400 bad_request
  AdminUserNotFound   -> 404 not_found
  BaseAdminProtected  -> 403 forbidden
  AdminUserExists     -> 409 conflict
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import AdminUserCreate, AdminUserResponse, RemovedResponse
from auth.actions import (
    AdminUserExists,
    AdminUserNotFound,
    BaseAdminProtected,
    add_admin_user,
    list_admin_users,
    remove_user,
)
from auth.dependencies import get_current_user
from auth.models import AdminUser, User
from auth.store import UserStore
from core.models import parse_id

router = APIRouter()


@router.get("/admin/users", response_model=list[AdminUserResponse])
async def list_users(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> list[AdminUserResponse]:
    """List allow-list entries, base admin first."""
    user_store: UserStore = request.app.state.user_store
    return [_to_response(u) for u in list_admin_users(user_store)]


@router.post("/admin/users", response_model=AdminUserResponse, status_code=201)
async def create_user(
    request: Request,
    body: AdminUserCreate,
    current_user: User = Depends(get_current_user),
) -> AdminUserResponse:
    """Add an e-mail address to the allow-list."""
    user_store: UserStore = request.app.state.user_store
    try:
        created = add_admin_user(user_store, body.email, body.name)
    except AdminUserExists as exc:
        raise HTTPException(status_code=409, detail={"code": "conflict", "message": str(exc)}) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail={"code": "bad_request", "message": str(exc)}) from exc
    return _to_response(created)


@router.delete("/admin/users/{user_id}", response_model=RemovedResponse)
async def delete_user(
    request: Request,
    user_id: str,
    current_user: User = Depends(get_current_user),
) -> RemovedResponse:
    """Remove an allow-list entry.

    user_id is taken as a string and parsed here so a malformed id gets the
    same 400 envelope as other bad input instead of a 422 validation error.
    """
    parsed = parse_id(user_id)
    if parsed is None:
        raise HTTPException(status_code=400, detail={"code": "bad_request", "message": "invalid user id"})

    user_store: UserStore = request.app.state.user_store
    try:
        remove_user(user_store, parsed)
    except AdminUserNotFound as exc:
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": str(exc)}) from exc
    except BaseAdminProtected as exc:
        raise HTTPException(status_code=403, detail={"code": "forbidden", "message": str(exc)}) from exc
    return RemovedResponse()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_response(user: AdminUser) -> AdminUserResponse:
    return AdminUserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        is_base_admin=user.is_base_admin,
        created_at=user.created_at or "",
    )
