"""Rate limiting using slowapi"""

from fastapi import Request
from slowapi import Limiter

from app.core.config import settings


def get_rate_limit_key(request: Request) -> str:
    """Rate limit key based on the client address"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"

    return f"ip:{ip}"


limiter = Limiter(
    key_func=get_rate_limit_key,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    enabled=settings.RATE_LIMIT_ENABLED,
)
