from __future__ import annotations

from flask import current_app
from flask_caching import Cache
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

cache: Cache = Cache()


def default_rate_limit() -> str:
    # Read per request so every app instance uses its own RATELIMIT_DEFAULT
    return current_app.config.get("RATELIMIT_DEFAULT", "100 per minute")


# Rate limiter (IP-based)
limiter: Limiter = Limiter(key_func=get_remote_address, default_limits=[default_rate_limit])
