# core/rate_limiter.py

from typing import Dict, Tuple
from fastapi import Request
from collections import defaultdict
import time

from core.config import settings
from core.errors import ApiError


# Sliding-window limiter kept in process memory.
_rate_limit_store: Dict[str, list] = defaultdict(list)


def check_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60,
) -> Tuple[bool, int]:
    """
    Record a request for ``identifier`` and report whether it is allowed.

    Returns:
        Tuple of (allowed, remaining)
    """
    now = time.time()
    window_start = now - window_seconds

    requests = [ts for ts in _rate_limit_store[identifier] if ts > window_start]

    if len(requests) >= max_requests:
        _rate_limit_store[identifier] = requests
        return False, 0

    requests.append(now)
    _rate_limit_store[identifier] = requests

    return True, max_requests - len(requests)


def get_client_ip(request: Request) -> str:
    """Client IP, preferring the first X-Forwarded-For hop when behind a proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def require_rate_limit(
    identifier: str,
    max_requests: int = 10,
    window_seconds: int = 60
) -> int:
    """
    Raise a 429 ApiError once ``identifier`` exceeds the window budget.
    """
    allowed, remaining = check_rate_limit(identifier, max_requests, window_seconds)

    if not allowed:
        raise ApiError(
            429,
            "Too many requests. Please try again later.",
            headers={
                "X-RateLimit-Limit": str(max_requests),
                "X-RateLimit-Window": str(window_seconds),
                "Retry-After": str(window_seconds),
            },
        )

    return remaining


def rate_limit_auth(request: Request) -> int:
    """
    Dependency for login/registration endpoints: per-IP budget from settings.
    """
    return require_rate_limit(
        identifier=f"auth:{get_client_ip(request)}",
        max_requests=settings.AUTH_RATE_LIMIT_MAX,
        window_seconds=settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
    )


def reset_rate_limits():
    _rate_limit_store.clear()
