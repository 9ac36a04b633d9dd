"""
Core Rate Limiter Implementation

In-memory fixed-window counter keyed by an opaque caller-supplied string.
"""

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Dict, Optional

from .config import RateLimitConfig
from .exceptions import ConfigurationError
from .keys import RequestContext

logger = logging.getLogger(__name__)

DEFAULT_SHARDS = 16


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    requests: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitInfo:
    requests: int
    remaining: int
    reset_time: int


class _Shard:
    __slots__ = ('lock', 'entries')

    def __init__(self):
        self.lock = threading.Lock()
        self.entries: Dict[str, RateLimitEntry] = {}


class RateLimiter:
    """
    Fixed-window rate limiter.

    The store is split into shards, each guarded by its own lock, so the
    read-modify-write in check() is atomic per key while checks for keys in
    different shards proceed in parallel. Expired entries are swept at the
    start of every check() and get_all_entries() call.
    """

    def __init__(self, config: RateLimitConfig,
                 clock: Optional[Callable[[], int]] = None,
                 shards: int = DEFAULT_SHARDS):
        if isinstance(shards, bool) or not isinstance(shards, int) or shards <= 0:
            raise ConfigurationError(f"shards must be a positive integer, got {shards!r}")
        self.config = config
        self._clock = clock or _now_ms
        self._shards = [_Shard() for _ in range(shards)]

    def _shard_for(self, key: str) -> _Shard:
        return self._shards[hash(key) % len(self._shards)]

    def cleanup(self, now: Optional[int] = None) -> int:
        """
        Removes every entry whose window has ended.

        Returns:
            The number of entries removed
        """
        if now is None:
            now = self._clock()

        removed = 0
        for shard in self._shards:
            with shard.lock:
                expired = [key for key, entry in shard.entries.items() if entry.reset_time <= now]
                for key in expired:
                    del shard.entries[key]
                removed += len(expired)

        if removed:
            logger.debug("Swept %d expired rate limit entries", removed)
        return removed

    def check(self, request: RequestContext) -> RateLimitResult:
        """
        Counts one request and decides whether it may proceed.

        Args:
            request: Passed to the configured key generator; exceptions it
                raises propagate to the caller

        Returns:
            RateLimitResult with allowed, remaining quota and the window's
            reset time (epoch milliseconds)
        """
        now = self._clock()
        self.cleanup(now)

        key = self.config.key_generator(request)
        max_requests = self.config.max_requests
        shard = self._shard_for(key)

        with shard.lock:
            entry = shard.entries.get(key)

            if entry is None or entry.reset_time <= now:
                entry = RateLimitEntry(requests=1, reset_time=now + self.config.window_ms)
                shard.entries[key] = entry
                return RateLimitResult(True, max_requests - 1, entry.reset_time)

            if entry.requests < max_requests:
                entry.requests += 1
                return RateLimitResult(True, max_requests - entry.requests, entry.reset_time)

            reset_time = entry.reset_time

        logger.info("Rate limit exceeded for %s until %d", key, reset_time)
        return RateLimitResult(False, 0, reset_time)

    def reset(self, key: str) -> None:
        """Forgets a key's window, e.g. to clear a falsely flagged client."""
        shard = self._shard_for(key)
        with shard.lock:
            shard.entries.pop(key, None)

    def get_info(self, key: str) -> Optional[RateLimitInfo]:
        shard = self._shard_for(key)
        with shard.lock:
            entry = shard.entries.get(key)
            if entry is None:
                return None
            return RateLimitInfo(
                requests=entry.requests,
                remaining=max(0, self.config.max_requests - entry.requests),
                reset_time=entry.reset_time,
            )

    def get_all_entries(self) -> Dict[str, RateLimitEntry]:
        """Returns a copy of the live entries, after sweeping expired ones."""
        self.cleanup()
        snapshot: Dict[str, RateLimitEntry] = {}
        for shard in self._shards:
            with shard.lock:
                for key, entry in shard.entries.items():
                    snapshot[key] = replace(entry)
        return snapshot

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total
