# covergen/lib/rate_limit.py
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request, Response

from covergen.lib.errors import RateLimitError
from covergen.logger import get_logger

log = get_logger(__name__)


@dataclass
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: float        # epoch seconds when the current window closes
    total_hits: int
    limit: int
    retry_after: Optional[int] = None

    def headers(self) -> Dict[str, str]:
        h = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(int(math.ceil(self.reset_time))),
        }
        if self.retry_after is not None:
            h["Retry-After"] = str(self.retry_after)
        return h


class FixedWindowRateLimiter:
    """
    Fixed-window counter per identifier, held in process memory.
    The first hit opens a window of `window_seconds`; hits inside it are counted
    and a hit after it closes starts a new window at 1.
    Expired windows are pruned from within `check`, at most once per window.
    """

    def __init__(self, limit: int, window_seconds: float = 60.0, clock: Callable[[], float] = time.time):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()
        self._next_sweep = 0.0

    def __len__(self) -> int:
        return len(self._windows)

    def _prune(self, now: float) -> int:
        # caller holds the lock
        expired = [k for k, (_, reset_at) in self._windows.items() if reset_at <= now]
        for k in expired:
            del self._windows[k]
        self._next_sweep = now + self.window_seconds
        return len(expired)

    def check(self, identifier: str) -> RateLimitResult:
        key = f"rate-limit:{identifier}"
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                removed = self._prune(now)
                if removed:
                    log.debug(f"pruned {removed} expired rate-limit window(s)")
            count, reset_at = self._windows.get(key, (0, 0.0))
            if count == 0 or reset_at <= now:
                count, reset_at = 0, now + self.window_seconds
            count += 1
            self._windows[key] = (count, reset_at)

        allowed = count <= self.limit
        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, self.limit - count),
            reset_time=reset_at,
            total_hits=count,
            limit=self.limit,
            retry_after=None if allowed else max(1, int(math.ceil(reset_at - now))),
        )

    def cleanup(self) -> int:
        with self._lock:
            return self._prune(self._clock())

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()
            self._next_sweep = 0.0


# requests per minute, per client IP
ENDPOINT_LIMITS: Dict[str, int] = {
    "generate": 5,
    "moderate": 20,
    "analytics": 50,
    "templates": 30,
    "health": 100,
    "default": 10,
}

limiters: Dict[str, FixedWindowRateLimiter] = {
    name: FixedWindowRateLimiter(limit, 60) for name, limit in ENDPOINT_LIMITS.items()
}


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def rate_limit(name: str = "default"):
    """
    FastAPI dependency enforcing the named limiter for the calling IP.
    Adds X-RateLimit-* headers to the response; raises 429 when over the limit.
    The result is kept on `request.state` so error responses carry the headers too.
    """
    limiter = limiters.get(name) or limiters["default"]

    def _dependency(request: Request, response: Response) -> RateLimitResult:
        ip = client_ip(request)
        result = limiter.check(f"{name}:{ip}")
        request.state.rate_limit = result
        if not result.allowed:
            log.warning(f"rate limit exceeded for {ip} on {name} ({result.total_hits}/{result.limit})")
            raise RateLimitError(
                details={
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "reset_time": result.reset_time,
                    "retry_after": result.retry_after,
                },
                headers=result.headers(),
            )
        for k, v in result.headers().items():
            response.headers[k] = v
        return result

    return _dependency


def rate_limit_headers(request: Request) -> Dict[str, str]:
    """Headers of the limiter that ran for this request, if any."""
    result: Optional[RateLimitResult] = getattr(request.state, "rate_limit", None)
    return result.headers() if result is not None else {}


def reset_all() -> None:
    for limiter in limiters.values():
        limiter.reset()
