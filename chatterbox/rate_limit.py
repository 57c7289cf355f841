"""In-memory request throttling for the HTTP routes."""
from __future__ import annotations

from collections import deque
import math
import threading
import time
from typing import Callable, Deque, Dict

SWEEP_INTERVAL_SECONDS = 60


class _Bucket:
    __slots__ = ("hits", "window_seconds")

    def __init__(self, window_seconds: int) -> None:
        self.hits: Deque[float] = deque()
        self.window_seconds = window_seconds

    def trim(self, now: float) -> None:
        window_start = now - self.window_seconds
        while self.hits and self.hits[0] <= window_start:
            self.hits.popleft()


class RateLimiter:
    """Sliding-window counter per key, guarded by a lock.

    A key is only held while it has requests inside its window. Keys that
    went idle are swept at most once per ``sweep_interval`` seconds.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        *,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ) -> None:
        self._buckets: Dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._last_sweep = clock()

    def hit(self, key: str, max_requests: int, window_seconds: int) -> int | None:
        """Record a request. Returns None when allowed, else seconds to wait."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)

            bucket = self._buckets.get(key)
            if bucket is not None:
                bucket.window_seconds = window_seconds
                bucket.trim(now)
                if len(bucket.hits) >= max_requests:
                    return max(1, math.ceil(bucket.hits[0] + window_seconds - now))
            else:
                bucket = self._buckets[key] = _Bucket(window_seconds)

            bucket.hits.append(now)
            return None

    def cleanup(self) -> int:
        """Drop every key with no request left inside its window."""
        with self._lock:
            return self._sweep(self._clock())

    def _sweep(self, now: float) -> int:
        expired = []
        for key, bucket in self._buckets.items():
            bucket.trim(now)
            if not bucket.hits:
                expired.append(key)
        for key in expired:
            del self._buckets[key]
        self._last_sweep = now
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
