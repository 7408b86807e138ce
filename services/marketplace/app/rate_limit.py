"""
Global slowapi rate limiter.

Imported by routers for per-endpoint limits and mounted onto app.state in
main.py so the slowapi middleware can find it. Storage comes from
RATE_LIMIT_STORAGE_URI: in-memory by default, Redis in multi-worker deployments.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import Settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=Settings().rate_limit_storage_uri,
)
