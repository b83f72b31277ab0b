"""Simple in-memory rate limiting for login attempts."""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict

from app.config import Settings
from app.core.exceptions import RateLimitExceededError


@dataclass
class _Bucket:
    timestamps: Deque[float]


class InMemoryRateLimiter:
    """Sliding-window rate limiter suitable for single-node deployments."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._buckets: Dict[str, _Bucket] = {}
        self._clock = clock

    def allow(self, key: str, limit: int, window_seconds: int) -> bool:
        now = self._clock()
        cutoff = now - window_seconds

        with self._lock:
            bucket = self._buckets.setdefault(key, _Bucket(timestamps=deque()))
            while bucket.timestamps and bucket.timestamps[0] < cutoff:
                bucket.timestamps.popleft()

            if len(bucket.timestamps) >= limit:
                return False

            bucket.timestamps.append(now)
            return True

    def check_login(self, settings: Settings, client_ip: str, email: str) -> None:
        """Count one login attempt for (ip, email); raise once either window is full."""
        user_key = email.strip().lower()
        per_min_key = f"login:min:{client_ip}:{user_key}"
        per_hour_key = f"login:hour:{client_ip}:{user_key}"
        if not self.allow(per_min_key, settings.LOGIN_RATE_LIMIT_PER_MINUTE, 60):
            raise RateLimitExceededError("Too many login attempts. Please wait a minute.")
        if not self.allow(per_hour_key, settings.LOGIN_RATE_LIMIT_PER_HOUR, 3600):
            raise RateLimitExceededError("Too many login attempts. Please try again later.")
