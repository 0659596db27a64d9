"""
core/images.py -- Public URL construction for stored image objects.

Images live in S3 under opaque keys ("uploads/<uuid>/thumb.jpg"). When a CDN
prefix is configured (IMAGE_BASE_URL) the browser fetches them from there;
otherwise the key is emitted unchanged and resolved relative to the site.

All functions here are pure and total -- they never raise for string input.
"""

from __future__ import annotations

from core.config import get_settings
from core.models import ImageKeys


def build_image_url(key: str, base_url: str | None = None) -> str:
    """Join a storage key onto the configured CDN base URL.

    One trailing slash is removed from the base and one leading slash from the
    key so the result has exactly one separator at the join. With no base
    configured the key is returned untouched, leading slash included.

    Args:
        key:      S3 object key.
        base_url: Override for Settings.image_base_url (mainly for tests).
    """
    base = get_settings().image_base_url if base_url is None else base_url
    if not base:
        return key
    base = base[:-1] if base.endswith("/") else base
    key = key[1:] if key.startswith("/") else key
    return f"{base}/{key}"


def build_thumb_url(image: ImageKeys, base_url: str | None = None) -> str:
    key = image.s3_key_thumb if image.s3_key_thumb is not None else image.s3_key
    return build_image_url(key, base_url)


def build_large_url(image: ImageKeys, base_url: str | None = None) -> str:
    key = image.s3_key_large if image.s3_key_large is not None else image.s3_key
    return build_image_url(key, base_url)


def build_original_url(image: ImageKeys, base_url: str | None = None) -> str:
    key = image.s3_key_original if image.s3_key_original is not None else image.s3_key
    return build_image_url(key, base_url)
