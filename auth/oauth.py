"""
auth/oauth.py -- Authlib Google OAuth configuration and sign-in policy.

Reads configuration from core.config.get_settings() at module load. Google is
registered only when both client ID and secret are configured; the login
template hides the button otherwise.

Sign-in policy:
  An identity may sign in only if its verified e-mail is on the admin
  allow-list (admin_users). BASE_ADMIN_EMAIL is always allowed and is upserted
  into the list with is_base_admin set on every successful check, so the base
  admin row cannot drift away from the environment.

  OAuth state (CSRF protection) is handled by authlib via Starlette
  SessionMiddleware.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from authlib.integrations.starlette_client import OAuth

from core.config import get_settings
from core.models import normalize_email

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("heron.auth.oauth")

# ---------------------------------------------------------------------------
# Authlib OAuth registry
# ---------------------------------------------------------------------------

oauth = OAuth()

_cfg = get_settings()

if _cfg.google_client_id and _cfg.google_client_secret:
    oauth.register(
        name="google",
        client_id=_cfg.google_client_id,
        client_secret=_cfg.google_client_secret,
        server_metadata_url="https://accounts.google.com/.well-known/openid-configuration",
        client_kwargs={"scope": "openid email profile"},
    )
    logger.info("Google OAuth provider registered")


def google_enabled() -> bool:
    cfg = get_settings()
    return bool(cfg.google_client_id and cfg.google_client_secret)


# ---------------------------------------------------------------------------
# Token -> identity
# ---------------------------------------------------------------------------


def get_google_user_info(token: dict) -> tuple[str, str]:
    """Extract (email, subject_id) from a Google id_token response.

    The email claim is only accepted when email_verified is True. A missing
    email_verified claim is treated as unverified.

    Raises:
        ValueError: If a verified email or the subject cannot be confirmed.
    """
    userinfo = token.get("userinfo")
    if not userinfo:
        raise ValueError("google OAuth: no userinfo in token response")

    if not userinfo.get("email_verified", False):
        raise ValueError("google OAuth: email is not verified")

    email = normalize_email(userinfo.get("email"))
    subject_id = userinfo.get("sub")
    if not email or not subject_id:
        raise ValueError("google OAuth: missing email or sub claim in userinfo")

    return email, str(subject_id)


# ---------------------------------------------------------------------------
# Allow-list policy
# ---------------------------------------------------------------------------


def is_allowed_email(store: UserStore, email: str) -> bool:
    """Return True if `email` may sign in.

    The base admin address short-circuits the lookup and refreshes its
    allow-list row. Any other address must already be listed.
    """
    email = normalize_email(email)
    if not email:
        return False

    base_admin = normalize_email(get_settings().base_admin_email)
    if base_admin and base_admin == email:
        store.upsert_base_admin(email)
        return True

    return store.get_admin_user_by_email(email) is not None


def ensure_user_record(store: UserStore, email: str, google_id: str) -> int:
    """Create or refresh the users row for a successful sign-in. Returns the user id."""
    return store.upsert_user(normalize_email(email), google_id)
