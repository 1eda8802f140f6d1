"""In-memory sliding-window rate limiter, keyed per client."""
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Optional

from .config import TTS_RATE_LIMIT, TTS_RATE_WINDOW
from .errors import RateLimited


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    retry_after: Optional[int] = None

    def headers(self) -> dict:
        h = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
        }
        if self.retry_after:
            h["Retry-After"] = str(self.retry_after)
        return h


class SlidingWindowLimiter:
    # Idle keys are pruned once this many clients are tracked
    MAX_KEYS = 1024

    def __init__(self, limit: int = TTS_RATE_LIMIT, window: float = TTS_RATE_WINDOW, clock=time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._hits: dict[str, deque] = {}

    def check(self, key: str) -> RateLimitResult:
        if key not in self._hits and len(self._hits) >= self.MAX_KEYS:
            self.prune()
        now = self.clock()
        hits = self._hits.setdefault(key, deque())
        while hits and now - hits[0] >= self.window:
            hits.popleft()

        if len(hits) >= self.limit:
            retry = math.ceil(hits[0] + self.window - now)
            return RateLimitResult(False, self.limit, 0, max(1, retry))

        hits.append(now)
        return RateLimitResult(True, self.limit, self.limit - len(hits))

    def prune(self):
        """Drop keys with no hits inside the window."""
        now = self.clock()
        for key in [k for k, hits in self._hits.items() if not hits or now - hits[-1] >= self.window]:
            del self._hits[key]

    def hit(self, key: str) -> RateLimitResult:
        """check() that raises RateLimited once the quota is spent."""
        result = self.check(key)
        if not result.allowed:
            raise RateLimited(result.retry_after)
        return result
