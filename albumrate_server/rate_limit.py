# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory rate limiting for auth endpoints (brute-force protection)."""

import time
from collections import deque

from fastapi import Request

from albumrate_server.config import settings
from albumrate_server.errors import TooManyRequests

# (client_key, endpoint) -> request timestamps in window
_buckets: dict[tuple[str, str], deque[float]] = {}
_last_sweep = 0.0
_clock = time.monotonic
# Window seconds; max requests per window per endpoint
WINDOW = 60
LIMITS: dict[str, int] = {
    "/api/auth/login": 10,
    "/api/auth/register": 5,
}


def _client_key(request: Request) -> str:
    """Peer address, or the first X-Forwarded-For hop when behind a trusted proxy."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host or "unknown"
    return "unknown"


def _clean_old(bucket: deque[float], now: float) -> None:
    cutoff = now - WINDOW
    while bucket and bucket[0] < cutoff:
        bucket.popleft()


def _sweep(now: float) -> None:
    """Forget clients with no requests left in the window. Runs at most once per window."""
    global _last_sweep
    if now - _last_sweep < WINDOW:
        return
    _last_sweep = now
    for key in list(_buckets):
        _clean_old(_buckets[key], now)
        if not _buckets[key]:
            del _buckets[key]


def reset() -> None:
    global _last_sweep
    _buckets.clear()
    _last_sweep = 0.0


def check_rate_limit(request: Request, path: str) -> None:
    """Raise TooManyRequests if the client has exceeded the limit for this path."""
    limit = LIMITS.get(path)
    if limit is None:
        return
    now = _clock()
    _sweep(now)
    key = (_client_key(request), path)
    bucket = _buckets.setdefault(key, deque())
    _clean_old(bucket, now)
    if len(bucket) >= limit:
        raise TooManyRequests()
    bucket.append(now)


async def rate_limit_auth_dep(request: Request) -> None:
    """FastAPI dependency: rate limit auth endpoints. Add Depends(rate_limit_auth_dep) to routes."""
    if not settings.rate_limit_enabled:
        return
    path = request.url.path.rstrip("/")
    if path in LIMITS:
        check_rate_limit(request, path)
