"""
auth/tokens.py -- JWT session tokens and the auth cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, email, role, and expiry. Verification returns None on any
       failure -- the route layer turns that into a 401 or a login redirect.

  There are no local passwords. Identities come from Google (or the dev
  bypass), so this module has no hashing helpers.

Layer rule: no imports from api/ or web/.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.config import get_settings

_settings = get_settings()

_ALGORITHM = "HS256"

COOKIE_NAME = "access_token"


def create_access_token(user_id: int, email: str, role: str, expire_seconds: int = 0) -> str:
    """Encode a signed JWT with user identity and expiry.

    Args:
        user_id:        Numeric users.id.
        email:          Normalized email, stored as the subject claim.
        role:           users.role.
        expire_seconds: Session duration. 0 means Settings.token_expire_seconds.
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {
        "sub": email,
        "user_id": user_id,
        "role": role,
        "exp": expire,
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT. Returns the payload dict or None on any failure."""
    try:
        payload = jwt.decode(token, _settings.secret_key, algorithms=[_ALGORITHM])
        if "user_id" not in payload or "role" not in payload:
            return None
        return payload
    except JWTError:
        return None


def set_auth_cookie(response, token: str, expire_seconds: int = 0) -> None:
    """Write the JWT as an httpOnly, samesite=lax cookie whose max_age matches the token."""
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=_settings.secure_cookies,
        max_age=duration,
    )
