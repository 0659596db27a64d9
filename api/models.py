"""
API request and response models for Heron REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AdminUserCreate(BaseModel):
    """Request body for POST /api/v1/admin/users.

    The email is normalized (trimmed, lower-cased) by the add action, not
    here, so blank input reaches the action and gets its 400 message.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(default="", max_length=320)
    name: str = Field(default="", max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AdminUserResponse(BaseModel):
    id: int
    email: str
    name: str = ""
    is_base_admin: bool
    created_at: str


class RemovedResponse(BaseModel):
    status: str = "removed"


class MeResponse(BaseModel):
    """Response for GET /api/v1/auth/me."""

    user_id: int
    email: str
    role: str


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
