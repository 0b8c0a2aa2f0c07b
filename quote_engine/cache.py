"""Short-TTL in-memory cache for quotes, pool snapshots and token metadata.

Entries are keyed by an exact request fingerprint and expire after a per-entry
TTL. The cache is owned by one engine instance; nothing here is module-global.
Expired entries are dropped when looked up, and ``set`` sweeps all of them at
most once per prune interval, so the store holds roughly one TTL worth of keys.

``get_or_compute`` optionally joins concurrent misses for the same key onto a
single in-flight computation ("single-flight"), so identical requests that
arrive before the first one finishes issue one set of RPC reads instead of one
each. Without it the cache behaves like a plain get/set pair and concurrent
identical misses all reach the RPC.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, NamedTuple

import structlog

from quote_engine.models.types import normalize_address

logger = structlog.get_logger()

DEFAULT_QUOTE_TTL = 30.0
DEFAULT_POOL_STATE_TTL = 60.0
DEFAULT_TOKEN_METADATA_TTL = 3600.0


class QuoteFingerprint(NamedTuple):
    """Cache key for a trade quote.

    Direction matters, so the token pair is NOT sorted. Addresses are
    lowercased so that differently-cased requests share an entry.
    """

    token_in: str
    token_out: str
    amount_in: int
    fee: int

    @classmethod
    def of(cls, token_in: str, token_out: str, amount_in: int, fee: int) -> QuoteFingerprint:
        return cls(normalize_address(token_in), normalize_address(token_out), amount_in, fee)


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    joined: int = 0  # misses served by another caller's in-flight computation


class QuoteCache:
    """TTL cache with optional single-flight computation.

    Not thread-safe: all access is expected from one event loop.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_QUOTE_TTL,
        *,
        single_flight: bool = True,
        clock: Callable[[], float] = time.monotonic,
        prune_interval: float | None = None,
    ):
        """Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when ``set`` is called without one
            single_flight: Join concurrent misses for the same key
            clock: Monotonic time source, injectable for tests
            prune_interval: Minimum seconds between sweeps of expired entries
                (default: default_ttl)
        """
        self.default_ttl = default_ttl
        self.single_flight = single_flight
        self._clock = clock
        self.prune_interval = default_ttl if prune_interval is None else prune_interval
        self._next_prune = clock() + self.prune_interval
        self._entries: dict[Hashable, _CacheEntry] = {}
        self._in_flight: dict[Hashable, asyncio.Future[Any]] = {}
        self.stats = CacheStats()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self._lookup(key) is not None

    def _lookup(self, key: Hashable) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def get(self, key: Hashable) -> Any | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._lookup(key)
        if entry is None:
            self.stats.misses += 1
            return None
        self.stats.hits += 1
        return entry.value

    def set(self, key: Hashable, value: Any, ttl_seconds: float | None = None) -> None:
        """Store a value for ttl_seconds (default TTL if None).

        A non-positive TTL stores nothing. Expired entries are swept at most
        once per prune interval, on write.
        """
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            self._entries.pop(key, None)
            return

        now = self._clock()
        if now >= self._next_prune:
            removed = self.prune_expired()
            if removed:
                logger.debug("cache_pruned", removed=removed, remaining=len(self._entries))
            self._next_prune = now + self.prune_interval
        self._entries[key] = _CacheEntry(value=value, expires_at=now + ttl)

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry. Returns True if something was removed."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()
        logger.info("cache_cleared")

    def prune_expired(self) -> int:
        """Remove every expired entry and return how many were dropped."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now >= entry.expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], Awaitable[Any]],
        ttl_seconds: float | None = None,
    ) -> Any:
        """Return the cached value for key, computing and storing it on a miss.

        Failures are never cached. With single-flight enabled, a failure is
        raised to every caller that joined the computation.
        """
        entry = self._lookup(key)
        if entry is not None:
            self.stats.hits += 1
            logger.debug("cache_hit", key=key)
            return entry.value

        self.stats.misses += 1

        if not self.single_flight:
            value = await compute()
            self.set(key, value, ttl_seconds)
            return value

        pending = self._in_flight.get(key)
        if pending is not None:
            self.stats.joined += 1
            logger.debug("cache_join_in_flight", key=key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._compute_and_store(key, compute, ttl_seconds))
        self._in_flight[key] = task
        task.add_done_callback(lambda done, key=key: self._forget_in_flight(key, done))
        return await asyncio.shield(task)

    async def _compute_and_store(
        self,
        key: Hashable,
        compute: Callable[[], Awaitable[Any]],
        ttl_seconds: float | None,
    ) -> Any:
        value = await compute()
        self.set(key, value, ttl_seconds)
        return value

    def _forget_in_flight(self, key: Hashable, done: asyncio.Future[Any]) -> None:
        if self._in_flight.get(key) is done:
            del self._in_flight[key]
        # Mark the exception retrieved; it has already been raised to the awaiting callers
        if not done.cancelled():
            done.exception()


__all__ = [
    "DEFAULT_QUOTE_TTL",
    "DEFAULT_POOL_STATE_TTL",
    "DEFAULT_TOKEN_METADATA_TTL",
    "QuoteFingerprint",
    "CacheStats",
    "QuoteCache",
]
