"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (to mount as middleware) and web/routes.py (to apply
per-route limits with @limiter.limit()). A single shared instance keeps one
in-memory counter store for every route.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
