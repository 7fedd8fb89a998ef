"""Rate limiter configuration module.

Lives outside main.py so routers can decorate endpoints without importing
the application module.
"""

from fastapi import Request
from slowapi import Limiter

from helpers.request_utils import get_client_ip


def client_ip_key(request: Request) -> str:
    """Rate limit key: the proxy-aware client IP."""
    return get_client_ip(request) or "unknown"


limiter = Limiter(key_func=client_ip_key)
