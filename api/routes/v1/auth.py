"""
api/routes/v1/auth.py -- Session and client-environment REST endpoints.

Routes:
  GET  /api/v1/auth/me        -- current user info (requires auth)
  POST /api/v1/auth/logout    -- clears cookie; 200
  GET  /api/v1/env            -- client-exposed environment bag (public)

Sign-in itself is browser-only (Google OAuth redirect), so it lives in
web/routes.py rather than here.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import MeResponse
from auth.dependencies import get_current_user
from auth.models import User
from auth.tokens import COOKIE_NAME
from core.config import PublicEnv, public_env

router = APIRouter()


@router.get("/auth/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse(user_id=current_user.id, email=current_user.email, role=current_user.role)


@router.post("/auth/logout")
async def logout() -> JSONResponse:
    """Clear the JWT cookie and end the session."""
    resp = JSONResponse(content={"message": "Logged out."})
    resp.delete_cookie(COOKIE_NAME)
    return resp


@router.get("/env", response_model=PublicEnv)
async def env() -> PublicEnv:
    """Return the variables browser code may read. Never includes secrets."""
    return public_env()
