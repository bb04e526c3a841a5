from __future__ import annotations

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from task_manager.app.responses import error_response

logger = logging.getLogger("task_manager.access")

WINDOW_SECONDS = 60.0
IDLE_CLIENT_SECONDS = 600.0
PRUNE_EVERY_SECONDS = 300.0


class RateLimiter:
    """Sliding one-minute window of request timestamps per client key."""

    def __init__(self, limit_per_min: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit_per_min
        self._clock = clock
        self._clients: Dict[str, Deque[float]] = {}
        self._last_seen: Dict[str, float] = {}
        self._last_prune = clock()
        self._lock = threading.Lock()

    def hit(self, key: str) -> Tuple[bool, int]:
        """
        Record a request for `key` unless it is over the limit.
        Returns (allowed, remaining).
        """
        now = self._clock()
        with self._lock:
            self._maybe_prune(now)
            window = self._clients.setdefault(key, deque())
            cutoff = now - WINDOW_SECONDS
            while window and window[0] <= cutoff:
                window.popleft()
            self._last_seen[key] = now

            if len(window) >= self.limit:
                return False, 0
            window.append(now)
            return True, self.limit - len(window)

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)

    def _maybe_prune(self, now: float) -> None:
        if now - self._last_prune < PRUNE_EVERY_SECONDS:
            return
        self._last_prune = now
        cutoff = now - IDLE_CLIENT_SECONDS
        for key in [k for k, seen in self._last_seen.items() if seen < cutoff]:
            self._clients.pop(key, None)
            self._last_seen.pop(key, None)


def client_key(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):
        key = client_key(request)
        allowed, remaining = self.limiter.hit(key)
        limit = str(self.limiter.limit)

        if not allowed:
            logger.warning(
                "request.rate_limited",
                extra={"category": "http", "event": "request.rate_limited", "client": key, "path": request.url.path},
            )
            return error_response(
                429,
                "Rate limit exceeded",
                headers={"X-RateLimit-Limit": limit, "X-RateLimit-Remaining": "0", "Retry-After": "60"},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = limit
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
