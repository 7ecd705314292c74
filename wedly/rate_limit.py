"""
In-process fixed-window rate limiting, keyed by (bucket, client).

State lives in this worker's memory only, which is enough to blunt bursts
against the payment and AI endpoints.
"""
import logging
import threading
import time
from dataclasses import dataclass
from functools import wraps
from typing import Dict, Tuple

from django.http import JsonResponse

from .constants import RATE_LIMITS
from .http import client_ip

logger = logging.getLogger("wedly")


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float

    def headers(self) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(self.remaining, 0)),
            "X-RateLimit-Reset": str(int(self.reset_at)),
        }


class RateLimiter:
    def __init__(self, limits: Dict[str, Tuple[int, int]],
                 cleanup_interval: float = 60.0, max_entries: int = 10000):
        self.limits = dict(limits)
        self.cleanup_interval = cleanup_interval
        self.max_entries = max_entries
        self._windows: Dict[Tuple[str, str], Tuple[int, float]] = {}
        self._next_cleanup = 0.0
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._windows)

    def hit(self, bucket: str, key: str) -> RateLimitResult:
        max_requests, window_seconds = self.limits[bucket]
        now = time.time()

        with self._lock:
            if now >= self._next_cleanup or len(self._windows) >= self.max_entries:
                self._purge_expired(now)

            count, reset_at = self._windows.get((bucket, key), (0, now + window_seconds))
            if now >= reset_at:
                count, reset_at = 0, now + window_seconds

            if count >= max_requests:
                return RateLimitResult(False, max_requests, 0, reset_at)

            count += 1
            self._windows[(bucket, key)] = (count, reset_at)
            return RateLimitResult(True, max_requests, max_requests - count, reset_at)

    def release(self, bucket: str, key: str):
        """Give back one request of the current window."""
        with self._lock:
            entry = self._windows.get((bucket, key))
            if entry is None:
                return
            count, reset_at = entry
            if count <= 1:
                del self._windows[(bucket, key)]
            else:
                self._windows[(bucket, key)] = (count - 1, reset_at)

    def _purge_expired(self, now: float):
        # Caller holds the lock
        expired = [window for window, (_, reset_at) in self._windows.items() if now >= reset_at]
        for window in expired:
            del self._windows[window]
        self._next_cleanup = now + self.cleanup_interval
        if expired:
            logger.debug(f"[RATE_LIMIT] Purged {len(expired)} expired windows")

    def reset(self):
        with self._lock:
            self._windows.clear()
            self._next_cleanup = 0.0


rate_limiter = RateLimiter(RATE_LIMITS)


def rate_limited(bucket: str, skip_successful: bool = False):
    """
    Reject requests over the bucket's budget with 429 and add X-RateLimit-*
    headers. With skip_successful, responses below 400 do not count.
    """
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            ip = client_ip(request)
            result = rate_limiter.hit(bucket, ip)
            if not result.allowed:
                logger.warning(f"[RATE_LIMIT] {bucket} exceeded for {ip} on {request.path}")
                response = JsonResponse({
                    "error": "Too many requests, rate limit exceeded. Please try again later.",
                    "category": "rate_limit",
                }, status=429)
                response["Retry-After"] = str(max(int(result.reset_at - time.time()), 1))
            else:
                response = view(request, *args, **kwargs)
                if skip_successful and response.status_code < 400:
                    rate_limiter.release(bucket, ip)
                    result.remaining += 1
            for header, value in result.headers().items():
                response[header] = value
            return response
        return wrapper
    return decorator
