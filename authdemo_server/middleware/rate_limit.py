"""Rate limiting for API protection"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from authdemo_server.config import settings


def get_identifier(request: Request) -> str:
    """
    Get identifier for rate limiting based on authentication

    Priority:
    1. Admin key
    2. Authenticated demo client (per address, the bearer key is shared)
    3. IP address (for unauthenticated)
    """
    admin_key = request.headers.get("x-admin-key")
    if admin_key and admin_key == settings.ADMIN_API_KEY:
        return "admin:authenticated"

    address = get_remote_address(request)
    if request.headers.get("authorization", "").startswith("Bearer "):
        return f"client:{address}"

    return address


# Create limiter instance
limiter = Limiter(
    key_func=get_identifier,
    default_limits=settings.RATE_LIMIT_DEFAULT,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
