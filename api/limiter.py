"""
api/limiter.py -- Shared slowapi rate limiter instance.

Only POST /v1/auth/login carries a limit (Settings.login_rate_limit). Counters
live in Settings.rate_limit_storage_uri: "memory://" is per-process, so a
deployment running several uvicorn workers should point it at Redis
("redis://host:6379") to share counts.

Keyed by client address, as seen by the ASGI server (put the proxy's
forwarded-for handling in uvicorn, not here).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

limiter = Limiter(key_func=get_remote_address, storage_uri=get_settings().rate_limit_storage_uri)
