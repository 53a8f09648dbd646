# ─────────────────────────────────────────────────────────────────────────────
# Rate Limiter — fixed-window per-client admission control
# ─────────────────────────────────────────────────────────────────────────────
# Each client key gets a window of `window_seconds` holding at most
# `max_requests` admissions, counted by a `limits` FixedWindowRateLimiter.
# MemoryStorage drops a key once its window expires, so idle clients don't
# accumulate.
#
# test() then hit() runs under a lock: a denied request never increments the
# counter, and two checks for the same key never interleave.
# ─────────────────────────────────────────────────────────────────────────────


import math
import threading
import time
from collections.abc import Mapping
from dataclasses import dataclass

import structlog
from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter

from sketchgen.exceptions import RateLimitError

logger = structlog.get_logger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float  # epoch seconds
    retry_after: int


class RateLimiter:
    """Fixed-window limiter: ``max_requests`` per ``window_seconds`` per key.

    A window opens on the first request from a key; once it expires the
    next request opens a fresh one with a count of 1.
    """

    def __init__(self, max_requests: int = 10, window_seconds: int = 60) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        self._storage = MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)
        self._lock = threading.Lock()

    def check(self, client_key: str) -> RateLimitDecision:
        """Admit or deny one request from ``client_key``.

        Denials do not touch the stored window.
        """
        with self._lock:
            allowed = self._limiter.test(self._item, client_key)
            if allowed:
                self._limiter.hit(self._item, client_key)
            stats = self._limiter.get_window_stats(self._item, client_key)

        return RateLimitDecision(
            allowed=allowed,
            remaining=stats.remaining,
            reset_at=stats.reset_time,
            retry_after=max(math.ceil(stats.reset_time - time.time()), 1),
        )

    def enforce(self, client_key: str) -> RateLimitDecision:
        """Like :meth:`check`, but raises :class:`RateLimitError` on denial."""
        decision = self.check(client_key)
        if not decision.allowed:
            logger.warning(
                "rate_limited",
                client=client_key,
                limit=self.max_requests,
                retry_after=decision.retry_after,
            )
            raise RateLimitError(decision.retry_after)
        return decision


def client_key_from_headers(headers: Mapping[str, str]) -> str:
    """Derive the rate-limit identity from proxy headers.

    Uses the first hop of ``X-Forwarded-For``, then ``X-Real-IP``. Clients
    with neither share the ``unknown`` bucket.
    """
    forwarded = headers.get("x-forwarded-for", "")
    first_hop = forwarded.split(",")[0].strip()
    if first_hop:
        return first_hop

    real_ip = headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip

    return UNKNOWN_CLIENT
