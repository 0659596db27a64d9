from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

# Roles stored on users.role. Every signed-in identity is currently an admin;
# the column exists so narrower roles can be added without a migration.
ROLE_ADMIN = "admin"

# Prefix for google_id values of identities created through the dev bypass.
LOCAL_ID_PREFIX = "local:"


@dataclass
class ImageKeys:
    """S3 keys for one stored image and its generated variants.

    Variant keys are None until the resize job has produced them; URL builders
    fall back to s3_key in that case.
    """

    s3_key: str
    s3_key_thumb: Optional[str] = None
    s3_key_large: Optional[str] = None
    s3_key_original: Optional[str] = None


@dataclass
class NavItem:
    href: str
    label: str
    auth_only: bool = False


NAV_ITEMS: list[NavItem] = [
    NavItem("/", "About"),
    NavItem("/admin", "Admin", auth_only=True),
]


def normalize_email(email: Optional[str]) -> str:
    """Trim and lower-case an e-mail address. None and blanks become ""."""
    return (email or "").strip().lower()


def parse_id(value: str) -> Optional[int]:
    """Return `value` as a positive int, or None if it is not one."""
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None
