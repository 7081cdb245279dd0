"""
Rate Limiter
============

Overview
--------
Fixed-window request counting per client identifier, held in process memory.
A fresh process starts with an empty limiter; nothing is persisted or shared
across processes.

Runtime Contract
----------------
    RateLimiter.check_and_record(client_id) -> bool
    client_id_from_headers(headers) -> str

Limitations
-----------
- Clients without forwarding headers collapse onto the "unknown" bucket and
  are throttled together.
- Stale entries are never evicted; acceptable for a single long-lived process
  with low traffic.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Python future features
from __future__ import annotations                 # Postponed evaluation of type annotations

# Standard libraries
import math                                        # Round Retry-After up to whole seconds
import threading                                   # Serialize check-and-increment across worker threads
import time                                        # Monotonic clock for window arithmetic
from dataclasses import dataclass                  # Lightweight per-client state
from typing import Callable, Dict, Mapping

# Identity used when no forwarding header is present
UNKNOWN_CLIENT = "unknown"

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

@dataclass
class RateLimitEntry:
    """Request count for one client within the window that began at `window_start`."""
    count: int
    window_start: float

class RateLimiter:
    """
    Thread-safe fixed-window limiter.

    Parameters
    ----------
    limit : int
        Maximum allowed requests per client within one window.
    window_seconds : float
        Window length. A window expires once strictly more than this many
        seconds have elapsed since it started.
    clock : callable, optional
        Time source returning seconds. Defaults to `time.monotonic`.
    """

    def __init__(self, limit: int = 5, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.limit = int(limit)
        self.window_seconds = float(window_seconds)
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def check_and_record(self, client_id: str) -> bool:
        """
        Record one request for `client_id` and report whether it is allowed.

        A missing or expired entry starts a new window with a count of one.
        A client already at the limit is rejected without touching its entry.
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(client_id)

            if entry is None or now - entry.window_start > self.window_seconds:
                self._entries[client_id] = RateLimitEntry(count=1, window_start=now)
                return True

            if entry.count >= self.limit:
                return False

            entry.count += 1
            return True

    def retry_after(self, client_id: str) -> int:
        """Whole seconds until the client's current window expires, 0 if none is active."""
        with self._lock:
            entry = self._entries.get(client_id)
            if entry is None:
                return 0
            remaining = self.window_seconds - (self._clock() - entry.window_start)
            return max(0, math.ceil(remaining))

    def reset(self) -> None:
        """Forget every client."""
        with self._lock:
            self._entries.clear()

# -----------------------------------------------------------------------------
# Client identity
# -----------------------------------------------------------------------------

def client_id_from_headers(headers: Mapping[str, str]) -> str:
    """
    Derive the rate-limit key from proxy headers.

    Uses the first address in X-Forwarded-For, then X-Real-IP, then the shared
    "unknown" identity. Header lookup is case-insensitive for Starlette headers.
    """
    forwarded = headers.get("x-forwarded-for") or headers.get("X-Forwarded-For")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = headers.get("x-real-ip") or headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()
    return UNKNOWN_CLIENT
