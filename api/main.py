"""
api/main.py -- FastAPI application entry point for Heron.

Run with:      python main.py serve
               uvicorn asgi:app --reload

Middleware, in registration order (Starlette runs the last one added first):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- CORS headers for the local front-end origins
  3. SlowAPIMiddleware     -- per-route rate limits from api.limiter
  4. SessionMiddleware     -- holds the OAuth state between redirect and callback

Lifespan handles startup (migrations, user store, OAuth registry) and
shutdown (close DB connection) symmetrically.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.admin_users import router as admin_users_router
from api.routes.v1.auth import router as auth_router
from auth.oauth import oauth as oauth_client
from auth.store import UserStore
from core.config import get_settings
from core.migrate import upgrade_head

VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("heron.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    With AUTO_MIGRATE off the tables must already exist (`python main.py migrate`);
    UserStore never creates them itself.
    """
    settings = get_settings()
    logger.info("Heron starting up")
    if settings.auto_migrate:
        upgrade_head()
    app.state.user_store = UserStore()
    app.state.oauth = oauth_client
    logger.info("Auth initialized (db=%s)", settings.cms_db_path)

    yield

    app.state.user_store.close()
    logger.info("Heron shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Heron",
    description="Admin and content API for the Heron CMS.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# authlib stores the OAuth state here between the redirect and the callback.
app.add_middleware(SessionMiddleware, secret_key=get_settings().secret_key)

app.state.limiter = limiter


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(admin_users_router, prefix="/api/v1", tags=["Admin users"])
# Web UI router is mounted by asgi.py, not here.


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error leaves as {"error": {"code", "message", "detail"?}} so clients
# can branch on error.code without knowing which layer raised it.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    envelope = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=envelope.model_dump())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 plus Retry-After. Only POST /login/dev is limited today."""
    response = _error_response(429, "rate_limited", "Too many requests.", str(exc))
    response.headers["Retry-After"] = str(int(getattr(exc, "retry_after", 60)))
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap HTTPException, including Starlette's own 404/405 for unknown routes.

    Route handlers raise with detail={"code", "message"}; such a dict becomes
    the error field as-is. Plain string details get a generic http_<status> code.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected errors. The traceback is logged, never returned."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Liveness probe. No auth, no database access."""
    return HealthResponse(version=VERSION)
