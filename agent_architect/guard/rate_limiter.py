"""Fixed-window rate limiter keyed by client identity and submission kind."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Protocol

from agent_architect.models import RateLimitInfo, SubmissionKind

RateLimitKey = tuple[str, str]


class RateLimitStore(Protocol):
    """Counter backend. ``increment`` must be atomic per key."""

    def increment(self, key: RateLimitKey, window_start: float) -> int:
        """Count one request in the window starting at ``window_start``.

        Returns the number of requests seen in that window, this one included.
        """
        ...

    def prune(self, before: float) -> int:
        """Drop windows that started before ``before``; return how many."""
        ...


@dataclass
class _Window:
    start: float
    count: int = 0


class InMemoryRateLimitStore:
    """Process-local store. Keys are serialized through striped locks."""

    def __init__(self, stripes: int = 64) -> None:
        self._windows: dict[RateLimitKey, _Window] = {}
        self._locks = [threading.Lock() for _ in range(stripes)]

    def _lock_for(self, key: RateLimitKey) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]

    def increment(self, key: RateLimitKey, window_start: float) -> int:
        with self._lock_for(key):
            window = self._windows.get(key)
            if window is None or window.start != window_start:
                window = _Window(start=window_start)
                self._windows[key] = window
            window.count += 1
            return window.count

    def prune(self, before: float) -> int:
        removed = 0
        for key, window in list(self._windows.items()):
            if window.start >= before:
                continue
            with self._lock_for(key):
                current = self._windows.get(key)
                if current is not None and current.start < before:
                    del self._windows[key]
                    removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._windows)


class FixedWindowRateLimiter:
    """N requests per (identity, kind) per clock-aligned window.

    Windows start at multiples of the window length, so they reset on
    elapsed time regardless of when requests arrive.
    Default: 10 requests per 60 seconds.
    """

    _PRUNE_EVERY = 1000

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60,
        store: RateLimitStore | None = None,
    ) -> None:
        if max_requests <= 0 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._store: RateLimitStore = store if store is not None else InMemoryRateLimitStore()
        self._checks = 0

    def check(self, identity: str, kind: SubmissionKind) -> RateLimitInfo:
        """Record a request and report whether it fits in the current window."""
        now = time.time()
        window_start = math.floor(now / self._window_seconds) * self._window_seconds

        self._checks += 1
        if self._checks % self._PRUNE_EVERY == 0:
            self._store.prune(window_start)

        count = self._store.increment((identity, kind.value), window_start)
        if count <= self._max_requests:
            return RateLimitInfo(allowed=True)

        remaining = window_start + self._window_seconds - now
        retry_in_ms = max(1, math.ceil(remaining * 1000))
        return RateLimitInfo(allowed=False, retry_in_ms=retry_in_ms)
