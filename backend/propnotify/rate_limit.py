"""Rate limiting singleton using slowapi.

Authenticated callers are limited per user so that one account sending from
several hosts shares a single budget; anonymous calls fall back to client IP.
"""

from fastapi import Request
from slowapi import Limiter


def _get_real_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _caller_key(request: Request) -> str:
    user_id = request.session.get("user_id") if "session" in request.scope else None
    if user_id:
        return f"user:{user_id}"
    return f"ip:{_get_real_ip(request)}"


limiter = Limiter(key_func=_caller_key)
