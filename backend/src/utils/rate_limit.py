"""
Shared slowapi rate limiter.

Routers decorate endpoints with ``@limiter.limit(...)``; main.py attaches
the same instance to ``app.state.limiter``. Counters live in the backend
named by RATE_LIMIT_STORAGE_URI.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from backend.src.config.settings import get_settings


limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=get_settings().rate_limit_storage_uri,
)
