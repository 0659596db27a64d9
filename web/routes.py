"""
web/routes.py -- Jinja2 template routes for the Heron web UI.

These routes serve server-rendered HTML. They share app.state with the API
routes (same user store, same OAuth registry) but return HTML or redirects
instead of JSON.

Route registration order matters: GET /login/oauth/google and
GET /login/callback/google are registered before GET /login.

Routes:
  GET  /                               -- home page
  GET  /login/oauth/google             -- OAuth redirect to Google
  GET  /login/callback/google          -- OAuth callback handler
  POST /login/dev                      -- dev bypass login (DEV_AUTH_BYPASS only)
  GET  /login                          -- login page
  POST /logout                         -- clear cookie, redirect /
  GET  /admin                          -- admin allow-list page (auth required)
  POST /admin/users                    -- add allow-list entry, redirect /admin
  POST /admin/users/{user_id}/remove   -- remove allow-list entry, redirect /admin
"""

import logging
from pathlib import Path
from typing import Optional

from authlib.integrations.starlette_client import OAuthError
from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from api.limiter import limiter
from auth.actions import AdminUserExists, AdminUserNotFound, BaseAdminProtected, add_admin_user, remove_user
from auth.dependencies import try_get_current_user
from auth.oauth import ensure_user_record, get_google_user_info, google_enabled, is_allowed_email
from auth.store import UserStore
from auth.tokens import COOKIE_NAME, create_access_token, set_auth_cookie
from core.config import get_settings, public_env
from core.images import build_image_url, build_large_url, build_thumb_url
from core.models import LOCAL_ID_PREFIX, NAV_ITEMS, normalize_email, parse_id

logger = logging.getLogger("heron.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
# Layout-level helpers. layout.html calls try_get_current_user(request) to
# decide which nav items to show, so route handlers never pass the user in.
templates.env.globals["try_get_current_user"] = try_get_current_user
templates.env.globals["public_env"] = public_env
templates.env.globals["nav_items"] = NAV_ITEMS
templates.env.globals["build_image_url"] = build_image_url
templates.env.globals["build_thumb_url"] = build_thumb_url
templates.env.globals["build_large_url"] = build_large_url
router = APIRouter()

_SESSION_NEXT_KEY = "login_next"

# ---------------------------------------------------------------------------
# Auth helpers
# ---------------------------------------------------------------------------

# Whitelist mapping for ?error= query params on /login.
# The raw query param is NEVER passed to templates -- only the message from
# this dict is.
_ERROR_MESSAGES: dict[str, str] = {
    "oauth_failed": "Sign-in with Google failed. Try again or use a different account.",
    "access_denied": "You are not authorized to access the admin area.",
    "dev_disabled": "Developer login is disabled.",
}

# Same treatment for ?msg= on /admin.
_ADMIN_MESSAGES: dict[str, tuple[str, str]] = {
    "added": ("success", "Admin user added."),
    "removed": ("success", "Admin user removed."),
    "exists": ("error", "That e-mail address is already on the list."),
    "email_required": ("error", "An e-mail address is required."),
    "not_found": ("error", "That admin user no longer exists."),
    "invalid_id": ("error", "Invalid admin user id."),
    "base_admin": ("error", "The base admin cannot be removed."),
}


def _safe_next(next_url: Optional[str], default: str = "/admin") -> str:
    """Validate a post-login redirect target. Only accept relative paths.

    Rejects absolute URLs and protocol-relative ("//host") paths so a crafted
    ?next= cannot send the user off-site after login.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return default


def _require_auth(request: Request, next_url: Optional[str] = None) -> Optional[RedirectResponse]:
    """Return a redirect to /login if the request is not authenticated, else None.

    next_url defaults to the request path. Form POST handlers pass the page
    that renders the form, since the browser returns to `next` with a GET.

    Call at the top of protected route handlers:
        if redirect := _require_auth(request):
            return redirect
    """
    if try_get_current_user(request) is None:
        return RedirectResponse(f"/login?next={next_url or request.url.path}", status_code=302)
    return None


def _login_redirect(next_url: str, user_id: int, email: str, role: str) -> RedirectResponse:
    token = create_access_token(user_id, email, role)
    resp = RedirectResponse(next_url, status_code=302)
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# GET / -- home page
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "home.html", {})


# ---------------------------------------------------------------------------
# Auth routes -- OAuth, dev bypass, login page, logout
# ---------------------------------------------------------------------------


@router.get("/login/oauth/google", response_class=HTMLResponse)
async def oauth_redirect(request: Request) -> RedirectResponse:
    """Redirect the browser to Google's authorization page.

    The post-login target is parked in the session because Google only echoes
    back the registered callback URL.
    """
    if not google_enabled():
        return RedirectResponse("/login?error=oauth_failed", status_code=302)

    request.session[_SESSION_NEXT_KEY] = _safe_next(request.query_params.get("next"))
    client = request.app.state.oauth.create_client("google")
    redirect_uri = str(request.url_for("oauth_callback"))
    return await client.authorize_redirect(request, redirect_uri)


@router.get("/login/callback/google", response_class=HTMLResponse, name="oauth_callback")
async def oauth_callback(request: Request) -> RedirectResponse:
    """Handle the Google callback and issue a JWT cookie.

    Flow:
      1. Exchange authorization code for token (authlib checks state).
      2. Extract the verified email and subject -- ValueError if unverified.
      3. Reject emails that are not on the allow-list (base admin always passes).
      4. Create or refresh the users row.
      5. Issue JWT, set cookie, redirect to the parked target or /admin.
    """
    if not google_enabled():
        return RedirectResponse("/login?error=oauth_failed", status_code=302)

    user_store: UserStore = request.app.state.user_store
    client = request.app.state.oauth.create_client("google")
    next_url = _safe_next(request.session.pop(_SESSION_NEXT_KEY, None))

    try:
        token = await client.authorize_access_token(request)
    except OAuthError:
        logger.exception("Google token exchange failed")
        return RedirectResponse("/login?error=oauth_failed", status_code=302)

    try:
        email, subject = get_google_user_info(token)
    except ValueError:
        logger.warning("Google login rejected: unverified or missing email")
        return RedirectResponse("/login?error=oauth_failed", status_code=302)

    if not is_allowed_email(user_store, email):
        logger.warning("Google login rejected: %s is not on the admin list", email)
        return RedirectResponse("/login?error=access_denied", status_code=302)

    user_id = ensure_user_record(user_store, email, subject)
    user = user_store.get_user_by_id(user_id)
    logger.info("Signed in %s via Google", email)
    return _login_redirect(next_url, user_id, email, user.role if user else "admin")


@limiter.limit(get_settings().dev_login_rate_limit)
@router.post("/login/dev", response_class=HTMLResponse)
def dev_login(request: Request, email: str = Form(default="")) -> RedirectResponse:
    """Sign in by e-mail alone. Only available when DEV_AUTH_BYPASS=true.

    The allow-list check still applies, so the bypass skips Google but not
    authorization.
    """
    if not get_settings().dev_auth_bypass:
        return RedirectResponse("/login?error=dev_disabled", status_code=302)

    user_store: UserStore = request.app.state.user_store
    normalized = normalize_email(email)
    if not normalized or not is_allowed_email(user_store, normalized):
        return RedirectResponse("/login?error=access_denied", status_code=302)

    user_id = ensure_user_record(user_store, normalized, f"{LOCAL_ID_PREFIX}{normalized}")
    logger.info("Signed in %s via dev bypass", normalized)
    return _login_redirect(_safe_next(request.query_params.get("next")), user_id, normalized, "admin")


@router.get("/login", response_class=HTMLResponse)
def login_form(request: Request) -> HTMLResponse:
    """Render the login page with the Google sign-in button."""
    if try_get_current_user(request) is not None:
        return RedirectResponse("/admin", status_code=302)

    settings = get_settings()
    error_msg = _ERROR_MESSAGES.get(request.query_params.get("error", ""), None)
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "error_msg": error_msg,
            "google_enabled": google_enabled(),
            "dev_login": settings.dev_auth_bypass,
            "next": _safe_next(request.query_params.get("next")),
        },
    )


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Clear the JWT cookie and redirect to the home page."""
    resp = RedirectResponse("/", status_code=302)
    resp.delete_cookie(COOKIE_NAME)
    return resp


# ---------------------------------------------------------------------------
# Admin allow-list
# ---------------------------------------------------------------------------


@router.get("/admin", response_class=HTMLResponse)
def admin_users_page(request: Request) -> HTMLResponse:
    if redirect := _require_auth(request):
        return redirect
    user_store: UserStore = request.app.state.user_store
    flash = _ADMIN_MESSAGES.get(request.query_params.get("msg", ""))
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "admin_users": user_store.list_admin_users(),
            "flash": flash,
        },
    )


@router.post("/admin/users", response_class=HTMLResponse)
def admin_users_add(
    request: Request,
    email: str = Form(default=""),
    name: str = Form(default=""),
) -> RedirectResponse:
    if redirect := _require_auth(request, next_url="/admin"):
        return redirect
    try:
        add_admin_user(request.app.state.user_store, email, name)
    except AdminUserExists:
        return RedirectResponse("/admin?msg=exists", status_code=302)
    except ValueError:
        return RedirectResponse("/admin?msg=email_required", status_code=302)
    return RedirectResponse("/admin?msg=added", status_code=302)


@router.post("/admin/users/{user_id}/remove", response_class=HTMLResponse)
def admin_users_remove(request: Request, user_id: str) -> RedirectResponse:
    if redirect := _require_auth(request, next_url="/admin"):
        return redirect
    parsed = parse_id(user_id)
    if parsed is None:
        return RedirectResponse("/admin?msg=invalid_id", status_code=302)
    try:
        remove_user(request.app.state.user_store, parsed)
    except AdminUserNotFound:
        return RedirectResponse("/admin?msg=not_found", status_code=302)
    except BaseAdminProtected:
        return RedirectResponse("/admin?msg=base_admin", status_code=302)
    return RedirectResponse("/admin?msg=removed", status_code=302)
