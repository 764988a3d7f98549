"""Fixed-window throttling of admin login attempts, keyed by client IP."""
from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import HTTPException, Request


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class LoginThrottle:
    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def allow(self, key: str) -> bool:
        """Count one attempt for key; False once the window's budget is spent."""
        now = self._clock()
        with self._lock:
            count, window_ends = self._attempts.get(key, (0, now + self.window_seconds))
            if now > window_ends:
                count, window_ends = 0, now + self.window_seconds
            count += 1
            self._attempts[key] = (count, window_ends)
            return count <= self.limit

    def check(self, request: Request) -> None:
        if not self.allow(client_ip(request)):
            raise HTTPException(429, "Too many login attempts. Try again shortly.")
