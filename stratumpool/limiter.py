"""Per-host request rate limiting for pool and GUI clients."""

from __future__ import annotations

import logging
import threading
import time
from enum import IntEnum
from typing import Callable

log = logging.getLogger(__name__)

# Pool clients mostly submit work at a controlled rate.
CLIENT_TOKEN_RATE = 5
CLIENT_BURST = 5
# A single GUI page may issue several requests at once.
GUI_TOKEN_RATE = 3
GUI_BURST = 7

Clock = Callable[[], float]


class ClientType(IntEnum):
    """Kinds of client subject to rate limiting."""

    GUI = 0
    POOL = 1


class TokenBucket:
    """A token bucket that starts full and refills at a steady rate."""

    def __init__(self, rate: float, burst: int,
                 clock: Clock = time.monotonic) -> None:
        self.rate = rate
        self.burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    def allow(self) -> bool:
        """Take one token if one is available."""
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._last)
            self._last = now
            self._tokens = min(float(self.burst),
                               self._tokens + elapsed * self.rate)
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False


_SETTINGS = {
    ClientType.GUI: (GUI_TOKEN_RATE, GUI_BURST),
    ClientType.POOL: (CLIENT_TOKEN_RATE, CLIENT_BURST),
}


class RateLimiter:
    """Keeps connected clients within their allocated request rates."""

    def __init__(self, clock: Clock = time.monotonic) -> None:
        self._clock = clock
        self._limiters: dict[str, TokenBucket] = {}
        self._lock = threading.Lock()

    def add_request_limiter(self, ip: str, client_type: int) -> TokenBucket:
        """Create and register a limiter for the given host."""
        try:
            kind = ClientType(client_type)
        except ValueError:
            raise ValueError(
                f"unknown client type provided: {client_type}") from None
        rate, burst = _SETTINGS[kind]
        limiter = TokenBucket(rate, burst, self._clock)
        with self._lock:
            self._limiters[ip] = limiter
        return limiter

    def fetch_limiter(self, ip: str) -> TokenBucket | None:
        """Return the limiter for the given host, if any."""
        with self._lock:
            return self._limiters.get(ip)

    def remove_limiter(self, ip: str) -> None:
        """Forget the limiter for the given host."""
        with self._lock:
            self._limiters.pop(ip, None)

    def within_limit(self, ip: str, client_type: int) -> bool:
        """Report whether the host may make another request.

        A limiter is created for hosts not seen before; an unknown client
        type is never within limit.
        """
        limiter = self.fetch_limiter(ip)
        if limiter is None:
            try:
                limiter = self.add_request_limiter(ip, client_type)
            except ValueError as exc:
                log.error("%s", exc)
                return False
        return limiter.allow()